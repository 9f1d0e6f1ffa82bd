"""spillway: compose named steps into sequential, parallel and mixed flows."""

from spillway._builder import RESULT_PREFIX, FlowBuilder
from spillway._config import configure, get_backend, reset, strict_dependencies
from spillway._context import (
    SharedContext,
    current_flow_id,
    current_flow_name,
    current_step_name,
)
from spillway._dag import generate_dag
from spillway._decorators import declared_steps, step
from spillway._errors import (
    CircularDependencyError,
    ContextTypeError,
    MissingContextKey,
    MissingDependencyError,
    SpillwayError,
    UnregisteredStep,
)
from spillway._executor import Executor, run_step
from spillway._graph import DependencyGraph
from spillway._registry import StepRegistry, default_registry
from spillway._strategies import (
    ExecutionStrategy,
    MixedStrategy,
    ParallelStrategy,
    SequentialStrategy,
    Task,
    get_strategy,
)
from spillway._types import FlowEntry, FlowGroup, StepRecord

__all__ = [
    "RESULT_PREFIX",
    "CircularDependencyError",
    "ContextTypeError",
    "DependencyGraph",
    "ExecutionStrategy",
    "Executor",
    "FlowBuilder",
    "FlowEntry",
    "FlowGroup",
    "MissingContextKey",
    "MissingDependencyError",
    "MixedStrategy",
    "ParallelStrategy",
    "SequentialStrategy",
    "SharedContext",
    "SpillwayError",
    "StepRecord",
    "StepRegistry",
    "Task",
    "UnregisteredStep",
    "configure",
    "current_flow_id",
    "current_flow_name",
    "current_step_name",
    "declared_steps",
    "default_registry",
    "generate_dag",
    "get_backend",
    "get_strategy",
    "reset",
    "run_step",
    "step",
    "strict_dependencies",
]
