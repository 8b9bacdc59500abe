"""Entry-point tasks that only wire other tasks together."""

from ..orchestrator import alias


# Maps are removed only after css has finished writing them
css_dist = alias(
    "css:dist",
    deps=["css", "css:clean"],
    sequence=True,
    description="Compile styles, then delete source maps",
)

dist = alias("dist", deps=["css:dist"], description="Production build")

default = alias(
    "default",
    deps=["watch", "css"],
    description="Compile styles and keep watching for changes",
)
