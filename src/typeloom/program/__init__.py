"""JSON programs: representation, parsing, evaluation and translation.

Public API:
    Program, Steps, FunctionCall, ResultReference,
    ValueExpr, ArrayExpr, ObjectExpr, UnknownExpr  -- expression tree
    parse_program                                  -- JSON -> Program
    Api, FunctionDefinition                        -- function registry
    Evaluator, EvaluationResult, evaluate          -- interpreter
    ProgramTranslator, ProgramValidator            -- request -> Program
    write_program                                  -- Program -> pseudo-code
"""

from typeloom.program.api import Api, FunctionDefinition
from typeloom.program.evaluator import EvaluationResult, Evaluator, evaluate
from typeloom.program.models import (
    ArrayExpr,
    Expression,
    FunctionCall,
    ObjectExpr,
    Program,
    ResultReference,
    Steps,
    UnknownExpr,
    ValueExpr,
)
from typeloom.program.parser import parse_expression, parse_program, program_to_json
from typeloom.program.translator import ProgramTranslator, ProgramValidator
from typeloom.program.writer import write_program

__all__ = [
    "Api",
    "ArrayExpr",
    "EvaluationResult",
    "Evaluator",
    "Expression",
    "FunctionCall",
    "FunctionDefinition",
    "ObjectExpr",
    "Program",
    "ProgramTranslator",
    "ProgramValidator",
    "ResultReference",
    "Steps",
    "UnknownExpr",
    "ValueExpr",
    "evaluate",
    "parse_expression",
    "parse_program",
    "program_to_json",
    "write_program",
]
