"""ingress-monitor-controller: website monitors for Kubernetes ingresses."""

__version__ = "0.1.0"

# Lazy imports to avoid loading heavy dependencies for CLI usage
__all__ = [
    "Monitor",
    "MonitorService",
    "IngressReconciler",
    "Options",
]

def __getattr__(name):
    if name == "Monitor":
        from .models import Monitor
        return Monitor
    elif name == "MonitorService":
        from .service import MonitorService
        return MonitorService
    elif name == "IngressReconciler":
        from .reconciler import IngressReconciler
        return IngressReconciler
    elif name == "Options":
        from .config import Options
        return Options
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
