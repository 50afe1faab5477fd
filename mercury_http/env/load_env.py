import os
from typing import Callable, Dict, Iterable, Tuple, TypeVar

from dotenv import dotenv_values

from .env import Env, PrimaryType

T = TypeVar("T", bound=Env)


def _typed_values(
    pairs: Iterable[Tuple[str, str | None]],
    types_map: Dict[str, Callable[[str], PrimaryType]],
) -> Dict[str, PrimaryType]:
    return {
        name: types_map[name](value)
        for name, value in pairs
        if name in types_map and value
    }


def load_env(
    default: type[T] = Env,
    env_file: str | None = ".env",
    override: T | None = None,
) -> T:
    """
    Build settings from, in increasing precedence: the process environment,
    the env file (when it exists) and the fields explicitly set on override.
    """
    types_map = default.types_map()

    values = _typed_values(os.environ.items(), types_map)

    if env_file and os.path.exists(env_file):
        values.update(
            _typed_values(dotenv_values(dotenv_path=env_file).items(), types_map)
        )

    if override is None:
        return default(**values)

    values.update(override.model_dump(exclude_unset=True))

    return type(override)(**values)
