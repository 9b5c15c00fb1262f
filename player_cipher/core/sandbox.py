"""
Isolated execution of extracted player code.

Every run gets a brand new Duktape heap (via dukpy), so nothing one program
defines or mutates can be seen by the next. The host bindings dukpy installs
for its own module system are removed before the program runs; the code only
sees the JavaScript built-ins.

A run synthesizes:

    <fragment, or "var <entrypoint> = (<fragment>);">
    var result = <entrypoint>(<JSON argument>);

and reads ``result`` back out of the context afterwards.
"""

import json
import logging
import re
from typing import Any

import dukpy

from ..utils.helpers import truncate
from .errors import EvaluationError

logger = logging.getLogger(__name__)

RESULT_BINDING = "result"

# dukpy exposes the host environment (process.env) and a python bridge used
# by require() and console; player code gets none of them.
_ISOLATION_PRELUDE = (
    "process = undefined; require = undefined; console = undefined; call_python = undefined;"
)


def build_program(fragment: str, entrypoint: str) -> str:
    """Bind *fragment* to *entrypoint* unless it already declares it."""
    if re.search(rf"var\s+{re.escape(entrypoint)}\s*=", fragment):
        return fragment
    return f"var {entrypoint} = ({fragment});"


class SandboxEvaluator:
    """Runs one entrypoint of a synthesized program in a fresh JS context."""

    def run(self, program: str, entrypoint: str, argument: Any) -> Any:
        """
        Execute *program* and return ``entrypoint(argument)``.

        Raises EvaluationError for syntax errors, thrown exceptions and any
        other fault inside the engine.
        """
        setup = build_program(program, entrypoint)
        script = f"{setup}\nvar {RESULT_BINDING} = {entrypoint}({json.dumps(argument)});"

        interpreter = dukpy.JSInterpreter()
        try:
            interpreter.evaljs(_ISOLATION_PRELUDE)
            interpreter.evaljs(script)
            result = interpreter.evaljs(RESULT_BINDING)
        except dukpy.JSRuntimeError as e:
            logger.debug("%s raised in sandbox: %s", entrypoint, e)
            raise EvaluationError(f"{entrypoint} failed: {e}", entrypoint=entrypoint) from e

        logger.debug("%s returned %s", entrypoint, truncate(result))
        return result
