"""Host functions shared by the test modules."""

from __future__ import annotations

from function_gateway.schemas.functions import FieldSpec, FunctionSchema, ReturnSpec

TEST_SECRET = "test-secret"
TEST_ACCOUNT = "acct-123"

ADD_NUMBERS = FunctionSchema(
    name="add_numbers",
    description="add two or more numbers together",
    arguments=[
        FieldSpec(
            name="numbers",
            type="array",
            items="number",
            description="array of numbers to add together",
        ),
    ],
    returns=ReturnSpec(type="number", description="the sum of the numbers"),
)


async def add_numbers(numbers: list[float]) -> float:
    return sum(numbers)
