import platform
from typing import Dict

__version__ = "0.1.0"

SDK_NAME = "speech-to-text-client-python"


def get_sdk_headers(service_name: str, service_version: str, operation_id: str) -> Dict[str, str]:
    """Diagnostic headers identifying this library and the operation being called"""
    return {
        "User-Agent": f"{SDK_NAME}-{__version__} {platform.system()} {platform.python_version()}",
        "X-IBMCloud-SDK-Analytics": (
            f"service_name={service_name};"
            f"service_version={service_version};"
            f"operation_id={operation_id}"
        ),
    }


def is_stream(audio) -> bool:
    """True for audio supplied as a readable file-like object or an async byte iterator"""
    if isinstance(audio, (bytes, bytearray, memoryview, str)):
        return False
    return callable(getattr(audio, "read", None)) or hasattr(audio, "__aiter__")
