"""
cqtool - Instalación de instancias CQ/AEM y reconciliación de nodos JCR
"""

__version__ = "1.0.0"
