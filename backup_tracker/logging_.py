import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_FORMAT)
    # httpx 요청 로그는 WARNING 이상만
    logging.getLogger("httpx").setLevel(logging.WARNING)
