from typing import Dict, Any, Callable, List, Tuple

import torch
import pytorch_lightning as pl
from fruitnet.experiment.utils import import_class
from fruitnet.training.loop import create_optimizer


class LitModel(pl.LightningModule):
    """Lightning wrapper training a hydra-configured chain against indicator targets."""

    def __init__(self, cfg) -> None:
        super().__init__()
        self.cfg = cfg
        self.save_hyperparameters(ignore=["cfg"])

        self.net = self._create_model(cfg.model)
        self.losses = self._create_losses(cfg.train.get("criterion", {}))  # list[(name, fn, weight)]

        self._create_metrics(cfg.get("metrics", {}))


    # ----- Lightning required methods -----

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.net(x)

    def training_step(self, batch, _):
        return self._step(batch, "train")

    def test_step(self, batch, _):
        self._step(batch, "test")

    def on_train_epoch_end(self):
        self._compute_and_log_metrics("train")

    def on_test_epoch_end(self):
        self._compute_and_log_metrics("test")

    def configure_optimizers(self):
        return create_optimizer(self.cfg.train.get("optimizer", {}), self.parameters())

    # ----- Core step -----

    def _step(self, batch, stage: str):

        if isinstance(batch, (list, tuple)) and len(batch) >= 2:
            x, y = batch[0], batch[1]
        else:
            raise ValueError(f"Unsupported batch format: {type(batch)}")

        outputs = self(x)

        total_loss = 0.0
        for name, fn, w in self.losses:
            l = fn(outputs, y)
            total_loss = total_loss + (w * l)
            self.log(f"{stage}/loss_{name}", l, batch_size=x.shape[0])

        self.log(f"{stage}/loss", total_loss, prog_bar=True, batch_size=x.shape[0])

        # Update metrics (accumulate, don't log yet)
        self._update_metrics(outputs, y, stage)

        return total_loss

    # ----- factories -----

    def _create_model(self, model_cfg: Dict[str, Any]):
        cls_path = model_cfg.get("class")
        if not cls_path:
            raise ValueError("cfg.model.class is required (e.g. 'projects.fruits.src.model.fruit_classifier').")
        factory = import_class(cls_path)
        return factory(**model_cfg.get("args", {}))

    def _create_losses(self, crit_cfg: Any) -> List[Tuple[str, Callable, float]]:
        """
        Accepts:
          - single dict: {class: "...", args: {}, weight: 1.0, name: "main"}
          - list of dicts: [{class: "...", args: {}, weight: 0.5, name: mse}, ...]
        Returns list of (name, loss_fn, weight). Defaults to mean squared error.
        """
        def build_one(cfg_item: Dict[str, Any], default_name: str) -> Tuple[str, Callable, float]:
            cls = import_class(cfg_item.get("class", "torch.nn.MSELoss"))
            fn = cls(**cfg_item.get("args", {}))
            name = cfg_item.get("name", default_name)
            weight = float(cfg_item.get("weight", 1.0))
            return name, fn, weight

        # ListConfig has __iter__ but no keys()
        if hasattr(crit_cfg, '__iter__') and not hasattr(crit_cfg, 'keys'):
            return [build_one(item, f"loss{i+1}") for i, item in enumerate(crit_cfg)]
        if hasattr(crit_cfg, 'keys'):
            return [build_one(crit_cfg, "main")]
        raise ValueError(f"Unsupported criterion config: {crit_cfg!r}")

    def _create_metrics(self, metrics_cfg: Dict[str, Any]) -> None:
        """Setup metrics for the train and test stages."""
        from torchmetrics import MetricCollection

        for stage in ["train", "test"]:
            if stage in metrics_cfg:
                stage_metrics = {}
                for name, spec in metrics_cfg[stage].items():
                    cls = import_class(spec["class"])
                    stage_metrics[name] = cls(**spec.get("args", {}))

                # Register MetricCollection as a module attribute
                if stage_metrics:
                    setattr(self, f"{stage}_metrics", MetricCollection(stage_metrics))

    def _update_metrics(self, outputs: torch.Tensor, targets: torch.Tensor, stage: str):
        """Accumulate metrics for the given stage; indicator targets become class positions."""
        metrics_attr = f"{stage}_metrics"

        if hasattr(self, metrics_attr):
            getattr(self, metrics_attr).update(outputs, targets.argmax(dim=-1))

    def _compute_and_log_metrics(self, stage: str):
        """Compute final metric values and log them at epoch end."""
        metrics_attr = f"{stage}_metrics"

        if hasattr(self, metrics_attr):
            metrics_collection = getattr(self, metrics_attr)

            for metric_name, metric_value in metrics_collection.compute().items():
                self.log(f"{stage}/{metric_name}", metric_value)

            # Reset metrics for next epoch
            metrics_collection.reset()
