"""Kinetics module — experimental data and the Arrhenius forward model."""

from .arrhenius import ForwardModel, make_model, rate_constant, simulate
from .dataset import ExperimentalDataset, ExpRecord, load_dataset

__all__ = [
    "ExperimentalDataset",
    "ExpRecord",
    "ForwardModel",
    "load_dataset",
    "make_model",
    "rate_constant",
    "simulate",
]
