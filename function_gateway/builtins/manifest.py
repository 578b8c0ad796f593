"""Builtin function schemas, grouped by category."""

from function_gateway.schemas.functions import (
    FieldSpec,
    FunctionSchema,
    ObjectSchema,
    ReturnSpec,
)

MATH_RESULT = ObjectSchema(
    name="MathResult",
    description="result of a mathematical operation",
    fields=[
        FieldSpec(name="result", type="number", description="the calculated result"),
        FieldSpec(name="operation", type="string", description="the operation that was performed"),
    ],
)

DATA_RESULT = ObjectSchema(
    name="DataResult",
    description="result of a data operation",
    fields=[
        FieldSpec(name="result", type="string", description="the operation result"),
        FieldSpec(name="operation", type="string", description="the operation that was performed"),
    ],
)

DATE_RESULT = ObjectSchema(
    name="DateResult",
    description="result of a date operation",
    fields=[
        FieldSpec(name="result", type="string", description="the date result"),
        FieldSpec(name="operation", type="string", description="the operation that was performed"),
    ],
)

SYSTEM_RESULT = ObjectSchema(
    name="SystemResult",
    description="result of a system operation",
    fields=[
        FieldSpec(name="result", type="string", description="the operation result"),
        FieldSpec(name="operation", type="string", description="the operation that was performed"),
        FieldSpec(name="timestamp", type="string", description="when the operation was performed"),
    ],
)

_NUMBERS = FieldSpec(
    name="numbers",
    type="array",
    items="number",
    description="array of numbers",
)


def _math(name: str, description: str, numbers_description: str) -> FunctionSchema:
    return FunctionSchema(
        name=name,
        description=description,
        arguments=[_NUMBERS.model_copy(update={"description": numbers_description})],
        returns=ReturnSpec(type="MathResult"),
        objects=[MATH_RESULT],
    )


MATH = [
    _math("add", "add two or more numbers together", "array of numbers to add together"),
    _math(
        "subtract",
        "subtract numbers from left to right",
        "array of numbers to subtract (first number minus the rest)",
    ),
    _math("multiply", "multiply two or more numbers together", "array of numbers to multiply together"),
    _math(
        "divide",
        "divide numbers from left to right",
        "array of numbers to divide (first number divided by the rest)",
    ),
    FunctionSchema(
        name="round",
        description="round a number to the nearest integer or specified decimal places",
        arguments=[
            FieldSpec(name="number", type="number", description="the number to round"),
            FieldSpec(
                name="decimals",
                type="number",
                description="number of decimal places (default: 0)",
                required=False,
            ),
        ],
        returns=ReturnSpec(type="MathResult"),
        objects=[MATH_RESULT],
    ),
]

DATA = [
    FunctionSchema(
        name="extract",
        description="extract a substring from text using start and end positions",
        arguments=[
            FieldSpec(name="text", type="string", description="the text to extract from"),
            FieldSpec(name="start", type="number", description="starting position (0-based)"),
            FieldSpec(
                name="end",
                type="number",
                description="ending position (optional, defaults to end of string)",
                required=False,
            ),
        ],
        returns=ReturnSpec(type="DataResult"),
        objects=[DATA_RESULT],
    ),
    FunctionSchema(
        name="replace",
        description="replace text in a string",
        arguments=[
            FieldSpec(name="text", type="string", description="the original text"),
            FieldSpec(name="search", type="string", description="text to search for"),
            FieldSpec(name="replace", type="string", description="text to replace with"),
        ],
        returns=ReturnSpec(type="DataResult"),
        objects=[DATA_RESULT],
    ),
    FunctionSchema(
        name="split",
        description="split a string into an array",
        arguments=[
            FieldSpec(name="text", type="string", description="the text to split"),
            FieldSpec(name="separator", type="string", description="the separator to split on"),
        ],
        returns=ReturnSpec(type="array", items="string", description="array of split strings"),
    ),
    FunctionSchema(
        name="join",
        description="join an array of strings into a single string",
        arguments=[
            FieldSpec(name="array", type="array", description="array of strings to join"),
            FieldSpec(
                name="separator",
                type="string",
                description="separator to use between items",
                required=False,
            ),
        ],
        returns=ReturnSpec(type="DataResult"),
        objects=[DATA_RESULT],
    ),
    FunctionSchema(
        name="filter",
        description="filter an array based on a condition",
        arguments=[
            FieldSpec(name="array", type="array", description="array to filter"),
            FieldSpec(
                name="condition",
                type="string",
                description="condition to filter by (e.g., '> 5', 'contains \"text\"', 'is not null')",
            ),
        ],
        returns=ReturnSpec(type="array", description="the items that matched"),
    ),
]

DATETIME = [
    FunctionSchema(
        name="format_date",
        description="format a date string",
        arguments=[
            FieldSpec(name="date", type="string", description="ISO 8601 date string"),
            FieldSpec(
                name="format",
                type="string",
                description="format string ('YYYY-MM-DD', 'MM/DD/YYYY' or 'ISO')",
                required=False,
            ),
        ],
        returns=ReturnSpec(type="DateResult"),
        objects=[DATE_RESULT],
    ),
    FunctionSchema(
        name="add_days",
        description="add or subtract days from a date",
        arguments=[
            FieldSpec(name="date", type="string", description="ISO 8601 date string"),
            FieldSpec(name="days", type="number", description="number of days to add (negative to subtract)"),
        ],
        returns=ReturnSpec(type="DateResult"),
        objects=[DATE_RESULT],
    ),
]

SYSTEM = [
    FunctionSchema(
        name="get_current_time",
        description="get the current date and time",
        returns=ReturnSpec(type="SystemResult"),
        objects=[SYSTEM_RESULT],
    ),
    FunctionSchema(
        name="generate_uuid",
        description="generate a random UUID",
        returns=ReturnSpec(type="SystemResult"),
        objects=[SYSTEM_RESULT],
    ),
]

TEXT = [
    FunctionSchema(
        name=name,
        description=description,
        arguments=[FieldSpec(name="text", type="string", description=arg_description)],
        returns=ReturnSpec(type="DataResult"),
        objects=[DATA_RESULT],
    )
    for name, description, arg_description in (
        ("to_uppercase", "convert text to uppercase", "text to convert"),
        ("to_lowercase", "convert text to lowercase", "text to convert"),
        ("trim", "remove whitespace from beginning and end of text", "text to trim"),
    )
]
