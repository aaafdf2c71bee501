"""
Built-in text operations

Operations:
  echo       — Return the message unchanged
  uppercase  — Upper-case a string
  process    — Combine a text and a number (exercises named CLI parameters)
"""

from pydantic import BaseModel, Field

from triport.core.operation import Invocation, make_operation
from triport.logger import get_logger

log = get_logger("operations.text")


class EchoInput(BaseModel):
    message: str = Field(..., min_length=1, description="Message to echo back")


class EchoOutput(BaseModel):
    echoed: str


class UppercaseInput(BaseModel):
    text: str = Field(..., description="Text to convert")


class UppercaseOutput(BaseModel):
    result: str


class ProcessInput(BaseModel):
    text: str = Field(..., min_length=1, description="Text to process")
    number: float = Field(..., ge=0, description="Non-negative number to double")


class ProcessOutput(BaseModel):
    result: str
    doubled: float
    input_length: int


async def _echo(call: Invocation[EchoInput]) -> EchoOutput:
    return EchoOutput(echoed=call.input.message)


async def _uppercase(call: Invocation[UppercaseInput]) -> UppercaseOutput:
    return UppercaseOutput(result=call.input.text.upper())


async def _process(call: Invocation[ProcessInput]) -> dict:
    log.debug(f"process request_id={call.config.request_id} length={len(call.input.text)}")
    return {
        "result": f"Processed: {call.input.text}",
        "doubled": call.input.number * 2,
        "input_length": len(call.input.text),
    }


echo = make_operation(
    name="echo",
    summary="Echo a message back to the caller",
    description="Takes a message string and returns it in the echoed field. "
                "Useful for checking the RPC round trip.",
    input=EchoInput,
    output=EchoOutput,
    handler=_echo,
)

uppercase = make_operation(
    name="uppercase",
    summary="Convert text to uppercase",
    description="Takes a text string and returns it upper-cased in the result field.",
    input=UppercaseInput,
    output=UppercaseOutput,
    handler=_uppercase,
)

process = make_operation(
    name="process",
    summary="Process a text and a number",
    description="Returns the prefixed text, the number doubled and the text length.",
    input=ProcessInput,
    output=ProcessOutput,
    handler=_process,
)

OPERATIONS = [echo, uppercase, process]
