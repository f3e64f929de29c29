import pytest
import torch

from fruitnet.data.labels import class_indices, encode_groups, onecold, onehot, onehotbatch


@pytest.mark.parametrize("k", [1, 2, 3, 5])
def test_onehot_has_single_active_entry_at_label(k):
    labels = range(1, k + 1)
    for l in labels:
        vec = onehot(l, labels)
        assert vec.shape == (k,)
        assert vec.sum().item() == 1.0
        assert vec[l - 1].item() == 1.0
        assert torch.count_nonzero(vec).item() == 1


def test_onehot_rejects_unknown_label():
    with pytest.raises(ValueError, match="not one of"):
        onehot(4, range(1, 4))
    with pytest.raises(ValueError):
        onehot("pear", ["apple", "banana", "grape"])


def test_class_indices_are_one_based_and_follow_group_order():
    assert class_indices([2, 1, 3]).tolist() == [1, 1, 2, 3, 3, 3]
    assert class_indices([0, 2]).tolist() == [2, 2]


def test_onehotbatch_rows_match_values():
    batch = onehotbatch(torch.tensor([3, 1, 2]), range(1, 4))
    assert batch.tolist() == [[0, 0, 1], [1, 0, 0], [0, 1, 0]]
    assert onehotbatch([], range(1, 4)).shape == (0, 3)


def test_onecold_inverts_onehot():
    labels = ["apple", "banana", "grape"]
    assert onecold(torch.tensor([0.1, 0.7, 0.2]), labels) == "banana"
    scores = torch.tensor([[0.9, 0.0, 0.1], [0.2, 0.1, 0.7]])
    assert onecold(scores, labels) == ["apple", "grape"]
    for name in labels:
        assert onecold(onehot(name, labels), labels) == name


def test_onecold_checks_score_count():
    with pytest.raises(ValueError):
        onecold(torch.tensor([0.5, 0.5]), ["apple", "banana", "grape"])


def test_encode_groups_aligns_features_classes_and_indicators(synthetic_groups):
    x, classes, y = encode_groups(synthetic_groups)
    assert x.shape == (9, 2)
    assert classes.tolist() == [1, 1, 1, 2, 2, 2, 3, 3, 3]
    assert y.shape == (9, 3)
    assert torch.all(y.sum(dim=1) == 1)
    assert torch.equal(y.argmax(dim=1) + 1, classes)
    assert torch.equal(x[3], synthetic_groups["banana"][0])
