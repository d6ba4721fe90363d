"""
JCR: transporte Sling, lectura de estado, introspección de tipos y reconciliación
"""

from cqtool.jcr.http import HttpResponse, SlingClient
from cqtool.jcr.reconciler import Reconciler, ReconcileResult, ResultStatus

__all__ = ["HttpResponse", "SlingClient", "Reconciler", "ReconcileResult", "ResultStatus"]
