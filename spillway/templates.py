"""Pre-composed flows for common pipelines.

Each factory returns an unexecuted :class:`FlowBuilder`; register the named
steps before calling :meth:`FlowBuilder.execute`.
"""

from __future__ import annotations

from spillway._builder import FlowBuilder
from spillway._context import SharedContext
from spillway._registry import StepRegistry


def cicd_pipeline(
    *,
    registry: StepRegistry | None = None,
    context: SharedContext | None = None,
) -> FlowBuilder:
    return (
        FlowBuilder("cicd", registry=registry, context=context)
        .add_step("git.checkout")
        .add_step("build.compile")
        .add_parallel_steps(["test.unit", "test.integration", "security.scan"])
        .add_step("docker.build")
        .add_step("deploy.staging")
        .add_step("test.e2e")
        .add_step("deploy.production")
    )


def microservices_deployment(
    *,
    registry: StepRegistry | None = None,
    context: SharedContext | None = None,
) -> FlowBuilder:
    """Infrastructure in order, services side by side, then a health check."""
    return (
        FlowBuilder("microservices", registry=registry, context=context)
        .sequential(
            lambda b: b.add_step("infra.setup-vpc")
            .add_step("infra.setup-database")
            .add_step("infra.run-migrations")
        )
        .parallel(
            lambda b: b.add_step("services.deploy-auth")
            .add_step("services.deploy-api")
            .add_step("services.deploy-notifications")
            .add_step("services.deploy-payments")
        )
        .add_step("health.check-all")
    )


def data_processing_pipeline(
    *,
    registry: StepRegistry | None = None,
    context: SharedContext | None = None,
) -> FlowBuilder:
    """Extract, check in parallel, transform and load.

    The final notification only runs when ``data.errors`` is ``0``.
    """
    return (
        FlowBuilder("data_processing", registry=registry, context=context)
        .add_step("data.extract")
        .parallel(
            lambda b: b.add_step("data.validate-schema")
            .add_step("data.clean-duplicates")
            .add_step("data.enrich-data")
        )
        .add_step("data.transform")
        .add_step("data.load")
        .add_conditional_step(
            "data.send-notification",
            lambda ctx: ctx.get("data.errors") == 0,
        )
    )
