import pytest
import torch

from fruitnet.nn.activations import identity, resolve_activation
from fruitnet.nn.layers import Dense, DimensionMismatch


@pytest.mark.parametrize("d_in,d_out", [(1, 1), (2, 4), (4, 3), (3, 7)])
def test_dense_maps_vectors_and_batches(d_in, d_out):
    layer = Dense(d_in, d_out, "sigmoid")
    assert layer.weight.shape == (d_out, d_in)
    assert layer.bias.shape == (d_out,)
    assert layer(torch.rand(d_in)).shape == (d_out,)
    assert layer(torch.rand(5, d_in)).shape == (5, d_out)


@pytest.mark.parametrize("shape", [(3,), (1,), (4, 3), (2, 2, 2)])
def test_dense_rejects_wrong_input_size(shape):
    layer = Dense(2, 4)
    with pytest.raises(DimensionMismatch):
        layer(torch.rand(*shape))


def test_dimension_mismatch_is_a_value_error():
    assert issubclass(DimensionMismatch, ValueError)


def test_dense_computes_activation_of_affine_map():
    layer = Dense(2, 2, "relu")
    with torch.no_grad():
        layer.weight.copy_(torch.tensor([[1.0, -1.0], [2.0, 0.5]]))
        layer.bias.copy_(torch.tensor([0.0, -1.0]))
    out = layer(torch.tensor([1.0, 3.0]))
    assert torch.allclose(out, torch.tensor([0.0, 2.5]))


def test_dense_initialization_is_small_with_zero_bias():
    torch.manual_seed(0)
    layer = Dense(2, 4)
    assert torch.all(layer.bias == 0)
    assert layer.weight.abs().max() <= (6.0 / (2 + 4)) ** 0.5


def test_dense_rejects_non_positive_sizes():
    with pytest.raises(ValueError):
        Dense(0, 3)


def test_resolve_activation_accepts_names_paths_and_callables():
    assert resolve_activation("Sigmoid") is torch.sigmoid
    assert resolve_activation(None) is identity
    assert resolve_activation(torch.tanh) is torch.tanh
    elu = resolve_activation("torch.nn.functional.elu")
    assert torch.allclose(elu(torch.tensor([-1.0, 1.0])), torch.nn.functional.elu(torch.tensor([-1.0, 1.0])))
    with pytest.raises(ValueError, match="Unknown activation"):
        resolve_activation("swishy")
