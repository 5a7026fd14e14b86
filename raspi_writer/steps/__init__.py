from .step_10_preflight import PreflightStep
from .step_20_select_software import SelectionCancelled, SelectSoftwareStep
from .step_30_install_software import InstallSoftwareStep
from .step_40_configure_display import ConfigureDisplayStep
from .step_50_configure_hotspot import ConfigureHotspotStep
from .step_90_finalize import FinalizeStep

__all__ = [
    "PreflightStep",
    "SelectSoftwareStep",
    "SelectionCancelled",
    "InstallSoftwareStep",
    "ConfigureDisplayStep",
    "ConfigureHotspotStep",
    "FinalizeStep",
]
