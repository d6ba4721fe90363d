"""
Aprovisionamiento de instancias CQ/AEM (JAR + licencia)
"""

from cqtool.installer.installer import InstallerConfig, InstallReport, install_instance, load_installer_config

__all__ = ["InstallerConfig", "InstallReport", "install_instance", "load_installer_config"]
