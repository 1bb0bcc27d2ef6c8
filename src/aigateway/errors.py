from typing import Optional

class GatewayError(Exception):
    pass

class ConfigError(GatewayError):
    pass

class UnknownProviderError(ConfigError):
    pass

class UpstreamError(GatewayError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

class UpstreamTimeout(UpstreamError):
    pass
