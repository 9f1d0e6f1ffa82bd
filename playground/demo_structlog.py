"""Demo: structlog integration.

Run this to see flow_id and step automatically injected into structlog output.
Note: requires `structlog` to be installed (pip install structlog).
"""

from __future__ import annotations

import asyncio

from spillway import FlowBuilder, SharedContext, StepRegistry, step
from spillway.contrib.structlog import flow_processor

try:
    import structlog
except ImportError:
    print("This demo requires structlog: pip install structlog")
    raise SystemExit(1) from None

structlog.configure(
    processors=[
        flow_processor,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.BoundLogger,
    logger_factory=structlog.PrintLoggerFactory(),
)

log = structlog.get_logger()


class Release:
    @step(name="git.checkout")
    async def checkout(self, ctx: SharedContext) -> str:
        log.info("checking out", branch="main")
        await asyncio.sleep(0.01)
        return "abc123"

    @step(name="test.unit")
    async def unit(self, ctx: SharedContext) -> int:
        await asyncio.sleep(0.02)
        log.info("unit tests passed", sha=ctx.require("result.git.checkout"))
        return 0

    @step(name="test.lint")
    async def lint(self, ctx: SharedContext) -> None:
        await asyncio.sleep(0.01)
        log.warning("something iffy", detail="check this")

    @step(name="deploy.staging")
    def deploy(self, ctx: SharedContext) -> None:
        log.info("deploying", failures=ctx.get("result.test.unit"))


if __name__ == "__main__":
    registry = StepRegistry()
    registry.register_instance(Release())

    # Outside a flow: no flow_id injected.
    log.info("before flow")

    flow = (
        FlowBuilder("release", registry=registry)
        .add_step("git.checkout")
        .add_parallel_steps(["test.unit", "test.lint"], ["result.git.checkout"])
        .add_conditional_step(
            "deploy.staging", lambda ctx: ctx.get("result.test.unit") == 0
        )
    )
    asyncio.run(flow.execute())

    # Outside again.
    log.info("after flow")
