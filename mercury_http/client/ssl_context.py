import ssl
from typing import Literal


VerifyMode = Literal["REQUIRED", "OPTIONAL", "NONE"]


def create_client_ssl_context(
    verify_file: str | None = None,
    verify_path: str | None = None,
    verify_mode: VerifyMode = "REQUIRED",
) -> ssl.SSLContext:
    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2

    if verify_file or verify_path:
        ctx.load_verify_locations(
            cafile=verify_file,
            capath=verify_path,
        )

    match verify_mode:
        case "REQUIRED":
            ctx.check_hostname = True
            ctx.verify_mode = ssl.CERT_REQUIRED

        case "OPTIONAL":
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_OPTIONAL

        case _:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE

    return ctx
