import pytest
import torch

from fruitnet.nn.chain import Chain, build_chain
from fruitnet.nn.layers import Dense, DimensionMismatch
from projects.fruits.src.model import fruit_classifier


@pytest.mark.parametrize("sizes", [[2, 3], [2, 4, 3], [3, 8, 8, 3], [5, 1, 2]])
def test_chain_dimensions_come_from_end_layers(sizes):
    chain = build_chain([(a, b, "sigmoid") for a, b in zip(sizes[:-1], sizes[1:])])
    assert chain.in_features == sizes[0]
    assert chain.out_features == sizes[-1]
    assert chain(torch.rand(sizes[0])).shape == (sizes[-1],)
    assert chain(torch.rand(6, sizes[0])).shape == (6, sizes[-1])


def test_chain_rejects_inconsistent_layers():
    with pytest.raises(DimensionMismatch, match="layer 1 expects 5"):
        Chain([Dense(2, 4), Dense(5, 3)])


def test_chain_rejects_wrong_input_at_first_call():
    chain = fruit_classifier()
    with pytest.raises(DimensionMismatch):
        chain(torch.rand(3))


def test_chain_rejects_empty_and_unknown_normalization():
    with pytest.raises(ValueError):
        Chain([])
    with pytest.raises(ValueError, match="normalization"):
        Chain([Dense(2, 3)], normalize="l2")


def test_chain_applies_layers_in_order():
    first, second = Dense(2, 4, "tanh"), Dense(4, 3, "sigmoid")
    chain = Chain([first, second])
    x = torch.rand(2)
    assert torch.equal(chain(x), second(first(x)))


@pytest.mark.parametrize("batch", [None, 1, 16])
def test_softmax_outputs_are_a_distribution(batch):
    torch.manual_seed(1)
    chain = build_chain([(2, 4, "relu"), (4, 3, "identity")], normalize="softmax")
    x = torch.randn(2) * 10 if batch is None else torch.randn(batch, 2) * 10
    out = chain(x)
    assert torch.all(out >= 0)
    assert torch.allclose(out.sum(dim=-1), torch.ones(out.shape[:-1]), atol=1e-6)


def test_forward_is_deterministic_with_fixed_parameters():
    chain = fruit_classifier()
    with torch.no_grad():
        for i, p in enumerate(chain.parameters()):
            p.copy_(torch.linspace(-1.0, 1.0, p.numel()).reshape(p.shape) * (i + 1))
    x = torch.tensor([0.3, 0.7])
    first = chain(x)
    for _ in range(5):
        assert torch.equal(chain(x), first)


def test_build_chain_defaults_to_identity_activation():
    chain = build_chain([(2, 2)])
    with torch.no_grad():
        chain.layers[0].weight.copy_(torch.eye(2))
    assert torch.equal(chain(torch.tensor([-3.0, 4.0])), torch.tensor([-3.0, 4.0]))


def test_fruit_classifier_is_two_four_three():
    chain = fruit_classifier()
    assert [(l.in_features, l.out_features) for l in chain.layers] == [(2, 4), (4, 3)]
    three_colour = fruit_classifier(n_features=3, normalize="softmax")
    assert three_colour.in_features == 3
    assert three_colour.normalize == "softmax"
