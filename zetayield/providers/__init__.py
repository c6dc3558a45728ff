from .cctx import CctxProvider, HttpClientConfig
from .zeta_rpc import ZetaRpcProvider

__all__ = ["CctxProvider", "HttpClientConfig", "ZetaRpcProvider"]
