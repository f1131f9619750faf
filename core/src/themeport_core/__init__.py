from themeport_core.config import CoreConfig, load_core_config
from themeport_core.home import ThemePortPaths, ensure_themeport_layout, resolve_themeport_home
from themeport_core.version import RESOURCES_VERSION

__version__ = "0.1.0"

__all__ = [
    "CoreConfig",
    "RESOURCES_VERSION",
    "ThemePortPaths",
    "__version__",
    "ensure_themeport_layout",
    "load_core_config",
    "resolve_themeport_home",
]
