"""Base protocol for pipeline handlers."""

from typing import Protocol, TypeVar

from quote_pipeline.core.exceptions import QuotePipelineError
from quote_pipeline.core.types import Result

# Contravariant input (handlers can accept supertypes), invariant output
T_In = TypeVar("T_In", contravariant=True)
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=QuotePipelineError)


class BaseHandler(Protocol[T_In, T_Out, T_Error]):
    """Protocol for synchronous pipeline handlers.

    Each handler performs a single transformation and reports rejection as a
    value, so malformed input never raises out of a stage.
    """

    def handle(self, command: T_In) -> Result[T_Out, T_Error]:
        """Process one input.

        Args:
            command: The output of the previous stage.

        Returns:
            A Result object containing either the next value or an error.
        """
        ...
