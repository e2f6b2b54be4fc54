"""
Capability detection for pytorch_trust_cg.

The solver itself only needs PyTorch; these helpers report which devices and
tensor layouts the installed PyTorch build supports, so that examples and
tests can pick what to run on.
"""

import warnings
from typing import Dict, List
from functools import lru_cache


@lru_cache(maxsize=1)
def check_cuda_available() -> bool:
    """
    Check if a CUDA device can run the solver.

    Returns:
        bool: True if torch reports a usable CUDA device
    """
    try:
        import torch
        return torch.cuda.is_available()
    except ImportError:
        return False
    except Exception as e:
        warnings.warn(f"CUDA check failed: {e}")
        return False


@lru_cache(maxsize=1)
def check_sparse_csr_available() -> bool:
    """
    Check if CSR tensors support the matrix-vector product the solver uses.

    Returns:
        bool: True if a small CSR product succeeds on the CPU
    """
    try:
        import torch
        if not hasattr(torch, 'sparse_csr'):
            return False

        dense = torch.tensor([[2.0, 1.0], [1.0, 3.0]], dtype=torch.float64)
        v = torch.ones(2, dtype=torch.float64)
        csr = dense.to_sparse_csr()
        result = (csr @ v.unsqueeze(-1)).squeeze(-1)
        return bool(torch.allclose(result, dense @ v))
    except ImportError:
        return False
    except (RuntimeError, NotImplementedError):
        return False


def get_available_devices() -> List[str]:
    """
    Get a list of devices the solver can run on.

    Returns:
        List[str]: 'cpu', plus 'cuda' when available
    """
    devices = ['cpu']
    if check_cuda_available():
        devices.append('cuda')
    return devices


def get_capabilities() -> Dict[str, bool]:
    """
    Get a dictionary of optional capabilities.

    Returns:
        Dict[str, bool]: Dictionary mapping capability names to availability status
    """
    return {
        'cuda': check_cuda_available(),
        'sparse_csr': check_sparse_csr_available(),
    }


def print_availability_report() -> None:
    """Print a short capability report."""
    import torch

    print("=" * 60)
    print("PyTorch Trust-Region CG - Availability Report")
    print("=" * 60)
    print(f"\nPyTorch version: {torch.__version__}")
    print(f"Default dtype: {torch.get_default_dtype()}")

    for name, available in get_capabilities().items():
        status = "Available" if available else "Not Available"
        print(f"  {name}: {status}")

    print(f"\nDevices: {', '.join(get_available_devices())}")
    print("=" * 60)


if __name__ == "__main__":
    print_availability_report()
