from .step_10_update_system import UpdateSystemStep
from .step_20_bootstrap_essentials import BootstrapEssentialsStep
from .step_30_gnome_desktop import GnomeDesktopStep
from .step_40_audio_stack import AudioStackStep
from .step_42_flatpak import FlatpakStep
from .step_44_firmware_performance import FirmwarePerformanceStep
from .step_46_btrfs_snapshots import BtrfsSnapshotsStep
from .step_50_online_accounts import OnlineAccountsStep
from .step_52_android_support import AndroidSupportStep
from .step_54_ios_support import IosSupportStep
from .step_60_boot_splash import BootSplashStep
from .step_62_kernel_headers import KernelHeadersStep
from .step_70_developer_tools import DeveloperToolsStep
from .step_90_cleanup import CleanupStep

__all__ = [
    "UpdateSystemStep",
    "BootstrapEssentialsStep",
    "GnomeDesktopStep",
    "AudioStackStep",
    "FlatpakStep",
    "FirmwarePerformanceStep",
    "BtrfsSnapshotsStep",
    "OnlineAccountsStep",
    "AndroidSupportStep",
    "IosSupportStep",
    "BootSplashStep",
    "KernelHeadersStep",
    "DeveloperToolsStep",
    "CleanupStep",
]
