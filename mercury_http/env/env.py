from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    MERCURY_HTTP_TIMEOUT: StrictStr = "10s"
    MERCURY_HTTP_MAX_RESPONSE_SIZE: StrictInt = 65536
    MERCURY_HTTP_SSL_VERIFY_FILE: StrictStr | None = None
    MERCURY_HTTP_SSL_VERIFY_PATH: StrictStr | None = None
    MERCURY_HTTP_VERIFY_SSL_CERT: Literal["REQUIRED", "OPTIONAL", "NONE"] = "REQUIRED"
    MERCURY_HTTP_READ_CHUNK_SIZE: StrictInt = 4096
    MERCURY_HTTP_ADDRESS_FAMILY: Literal["ipv4", "ipv6", "any"] = "any"
    MERCURY_HTTP_LOG_LEVEL: StrictStr = "info"
    MERCURY_HTTP_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "MERCURY_HTTP_TIMEOUT": str,
            "MERCURY_HTTP_MAX_RESPONSE_SIZE": int,
            "MERCURY_HTTP_SSL_VERIFY_FILE": str,
            "MERCURY_HTTP_SSL_VERIFY_PATH": str,
            "MERCURY_HTTP_VERIFY_SSL_CERT": str,
            "MERCURY_HTTP_READ_CHUNK_SIZE": int,
            "MERCURY_HTTP_ADDRESS_FAMILY": str,
            "MERCURY_HTTP_LOG_LEVEL": str,
            "MERCURY_HTTP_LOG_OUTPUT": str,
        }
