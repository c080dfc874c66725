"""kubeplane: 멀티 테넌트 Kubernetes 관리 플랫폼의 컨트롤 플레인."""

__version__ = "0.1.0"
