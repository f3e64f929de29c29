import os

import pytest
from hydra import compose, initialize_config_dir
from omegaconf import OmegaConf

from conftest import DATA_DIR, PROJECT_DIR
from fruitnet.experiment.experiment_main import experiment_main
from fruitnet.experiment.prepare_datasets import prepare_datasets
from fruitnet.experiment.setup_dataloaders import setup_dataloaders


def compose_cfg(tmp_path, *overrides):
    with initialize_config_dir(config_dir=PROJECT_DIR, version_base=None):
        return compose(config_name="main", overrides=[
            f"paths.data_dir={DATA_DIR}",
            f"paths.log_dir={tmp_path / 'logs'}",
            f"paths.plot_dir={tmp_path / 'plots'}",
            *overrides,
        ])


def test_project_config_composes(tmp_path):
    cfg = compose_cfg(tmp_path)
    assert cfg.project_name == "fruits"
    assert list(cfg.dataset.fruits.instances[0].args.categories) == ["apple", "banana", "grape"]
    assert cfg.train.criterion["class"] == "torch.nn.MSELoss"
    assert cfg.dataloader.train_args.batch_size == 1


def test_prepare_datasets_builds_train_and_test_splits(tmp_path):
    datasets = prepare_datasets(compose_cfg(tmp_path))
    splits = datasets["fruits"]
    assert set(splits) == {"train", "test"}
    assert len(splits["train"]) == 54
    assert len(splits["test"]) == 18
    assert splits["test"].labels == ["apple", "banana", "grape"]


def test_prepare_datasets_three_colour_override(tmp_path):
    cfg = compose_cfg(tmp_path, "dataset.fruits.args.features=[red,green,blue]")
    splits = prepare_datasets(cfg)["fruits"]
    assert splits["train"].x.shape == (54, 3)


def test_setup_dataloaders_respects_requested_splits(tmp_path):
    cfg = compose_cfg(tmp_path)
    loaders = setup_dataloaders(prepare_datasets(cfg), cfg.dataloader, splits=["train"])
    assert set(loaders["fruits"]) == {"train"}
    x, y = next(iter(loaders["fruits"]["train"]))
    assert x.shape == (1, 2) and y.shape == (1, 3)
    with pytest.raises(ValueError, match="Unsupported split"):
        setup_dataloaders({"fruits": {"holdout": []}}, cfg.dataloader)


def test_short_experiment_runs_all_phases(tmp_path, restore_root_logging):
    cfg = compose_cfg(tmp_path, "trainer.max_epochs=2", "visualization.resolution=20")
    model = experiment_main(cfg)

    assert model is not None
    assert model.net.in_features == 2
    assert os.path.exists(tmp_path / "logs" / "experiment.log")
    assert os.path.exists(tmp_path / "plots" / "fruits_red_blue_train.png")
    assert os.path.exists(tmp_path / "plots" / "fruits_red_blue_test.png")


def test_experiment_without_training_skips_dependent_phases(tmp_path, restore_root_logging):
    cfg = compose_cfg(tmp_path, "phases.training=false")
    assert experiment_main(cfg) is None
    assert not os.path.exists(tmp_path / "plots")


def test_default_outputs_live_in_the_hydra_run_directory():
    with initialize_config_dir(config_dir=PROJECT_DIR, version_base=None):
        cfg = compose(config_name="main")
    paths = OmegaConf.to_container(cfg.paths, resolve=False)
    assert paths["log_dir"] == "${hydra:runtime.output_dir}/logs"
    assert paths["plot_dir"] == "${hydra:runtime.output_dir}/plots"
    assert OmegaConf.to_container(cfg.pl_logger, resolve=False)["args"]["save_dir"] == "${paths.log_dir}"
