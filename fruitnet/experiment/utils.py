"""
Utility functions for experiments.
"""
import importlib


def import_class(dotted_path: str):
    """Import a class (or any module attribute) from a dotted path string.

    Args:
        dotted_path: Dotted path to the object (e.g., 'torch.optim.Adam' or
                     'fruitnet.nn.chain.build_chain')

    Returns:
        The imported object

    Raises:
        ImportError: If the path has no module part or the module cannot be imported
        AttributeError: If the attribute cannot be found in the module

    Example:
        >>> cls = import_class('torch.nn.MSELoss')
        >>> loss_fn = cls()
    """
    if "." not in dotted_path:
        raise ImportError(f"Expected a dotted path like 'package.module.Name', got '{dotted_path}'")
    module_path, attr_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, attr_name)
