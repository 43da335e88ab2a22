from __future__ import annotations

from typing import Literal, Union, get_args, get_origin

from fastapi import APIRouter
from pydantic import TypeAdapter

from evalconf.contracts import choices as C
from evalconf.contracts.eval_config import EvalConfig, EvalRun
from evalconf.contracts.metrics_specs import MetricConfig, MetricsSpec
from evalconf.contracts.model_specs import ModelSpec
from evalconf.contracts.options import Options
from evalconf.contracts.slicing_specs import SlicingSpec
from evalconf.io.schema_evolution import schema_snapshot
from evalconf.version import __version__

router = APIRouter()

# ---------- helpers ----------

def _flatten_literal_alias(alias):
    """
    Return a flat list of values from a TypeAlias that may be:
      - Literal["a","b"]
      - Union[Literal["a","b"], None]
      - Optional[Literal["a","b"]]  (Union[Literal, NoneType])
    """
    if get_origin(alias) is Literal:
        return list(get_args(alias))

    if get_origin(alias) is Union:
        vals = []
        for sub in get_args(alias):
            if get_origin(sub) is Literal:
                vals.extend(list(get_args(sub)))
            elif sub is type(None):
                vals.append(None)
        return vals if vals else None

    return None


def _schema_and_defaults(pyd_model):
    """Json schema + defaults (from a default instance) of a concrete record."""
    return {
        "schema": TypeAdapter(pyd_model).json_schema(),
        "defaults": pyd_model().model_dump(exclude_none=True),
    }


def _enums_payload():
    """Centralized enum lists for dropdowns, from evalconf.contracts.choices."""
    enums = {
        "ModelTypeName": _flatten_literal_alias(C.ModelTypeName),
        "MetricDirection": _flatten_literal_alias(C.MetricDirectionName),
        "ConfidenceIntervalMethod": _flatten_literal_alias(C.ConfidenceIntervalMethodName),
        "AggregationKind": _flatten_literal_alias(C.AggregationKind),
        "BinarizationKind": _flatten_literal_alias(C.BinarizationKind),
        "OutputArtifactName": _flatten_literal_alias(C.OutputArtifactName),
    }
    return {k: v for k, v in enums.items() if v is not None}


# ---------- routes ----------

@router.get("/defaults")
def get_all_defaults():
    """Consolidated schemas + defaults + enums for config editors."""
    return {
        "eval_config": _schema_and_defaults(EvalConfig),
        "eval_run": _schema_and_defaults(EvalRun),
        "model_spec": _schema_and_defaults(ModelSpec),
        "slicing_spec": _schema_and_defaults(SlicingSpec),
        "metrics_spec": _schema_and_defaults(MetricsSpec),
        "metric_config": _schema_and_defaults(MetricConfig),
        "options": _schema_and_defaults(Options),
        "enums": _enums_payload(),
        "schema_version": __version__,
    }


@router.get("/enums")
def get_enums():
    return {"enums": _enums_payload()}


@router.get("/wire")
def get_wire_layout():
    """Field numbers, wire types and reserved numbers of every message."""
    snapshot = schema_snapshot()
    return {
        name: {
            "fields": {str(n): f for n, f in layout["fields"].items()},
            "reserved": layout["reserved"],
        }
        for name, layout in snapshot.items()
    }
