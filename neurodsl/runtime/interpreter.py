"""
Tree-walking interpreter for neurodsl statements.

One ``Interpreter`` owns one environment, one output buffer, the active
classifier and the cached macro classifier. ``run`` is re-entrant: macro
statements synthesize DSL and run it through the same instance, so their
assignments are visible to the statements that follow.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from neurodsl.classifier.base import Classifier, ClassifierError, ModelKind
from neurodsl.classifier.factory import load_classifier
from neurodsl.config import Config
from neurodsl.dsl import ast
from neurodsl.dsl.errors import LexError, MacroDepthError, ModelLoadError
from neurodsl.dsl.lexer import is_quoted, tokenize
from neurodsl.dsl.parser import parse
from neurodsl.logging_config import get_output_logger
from neurodsl.macro.baseline import MacroSynthesizer
from neurodsl.runtime.environment import Environment
from neurodsl.runtime.values import RESERVED_LITERALS, Text, Value, binary, coerce, compare, parse_integer, texts_equal

logger = logging.getLogger(__name__)

ClassifierFactory = Callable[[str, Config], Classifier]


class Interpreter:
    def __init__(
        self,
        config: Optional[Config] = None,
        classifier_factory: ClassifierFactory = load_classifier,
        echo: bool = False,
        synthesizer: Optional[MacroSynthesizer] = None,
    ):
        self.config = config or Config()
        self.classifier_factory = classifier_factory
        self.echo = echo
        self.synthesizer = synthesizer or MacroSynthesizer(self.config)
        self.output_log = get_output_logger(self.config)

        self.env = Environment()
        self.output: List[str] = []
        self.classifier: Optional[Classifier] = None
        self.macro_classifier: Optional[Classifier] = None
        self._macro_load_failed = False
        self._macro_depth = 0

    # Output buffer

    def take_output(self) -> List[str]:
        """Return everything emitted so far and empty the buffer."""
        lines, self.output = self.output, []
        return lines

    def clear_output(self) -> None:
        self.output = []

    @property
    def variables(self) -> Dict[str, str]:
        return self.env.snapshot()

    def emit(self, message: str) -> None:
        self.output.append(message)
        self.output_log.info("neuro: %s", message)
        if self.echo:
            print(f"neuro: {message}")

    # Statements

    def run(self, statements: Iterable[ast.Statement]) -> None:
        """
        Execute statements in order.

        Raises:
            ModelLoadError: an ``AI:`` statement named an unloadable model
            MacroDepthError: macro expansion nested past ``config.max_macro_depth``
        """
        for statement in statements:
            self.execute(statement)

    def execute(self, statement: ast.Statement) -> None:
        if isinstance(statement, ast.ModelSelect):
            self.select_model(statement.path)
        elif isinstance(statement, ast.Output):
            self.emit(self.resolve_output(statement.argument))
        elif isinstance(statement, ast.Assign):
            self.env.set(statement.name, self.eval_expr(statement.expr))
        elif isinstance(statement, ast.AssignFromClassifier):
            prompt = statement.prompt.strip('"').strip()
            label = self._predict(prompt)
            self.env.set(statement.name, label if label is not None else prompt)
        elif isinstance(statement, ast.MacroInvoke):
            self.run_macro(statement.instruction)
        elif isinstance(statement, ast.Conditional):
            self.run(self._select_branch(statement))

    def select_model(self, path: str) -> None:
        classifier = self.classifier_factory(path, self.config)
        self.classifier = classifier
        if classifier.kind == ModelKind.MACRO_INTENT:
            self.macro_classifier = classifier

    def resolve_output(self, argument: str) -> str:
        """Quoted literal -> its content; live variable -> its value; else the raw text."""
        if is_quoted(argument):
            return argument[1:-1]
        value = self.env.text(argument)
        if value is not None:
            return value.strip()
        return argument.strip('"').strip()

    def _select_branch(self, statement: ast.Conditional) -> List[ast.Statement]:
        if self.eval_bool(statement.condition):
            return list(statement.body)
        for condition, body in statement.elif_branches:
            if self.eval_bool(condition):
                return list(body)
        if statement.else_body is not None:
            return list(statement.else_body)
        return []

    # Macros

    def run_macro(self, instruction: str) -> None:
        if self._macro_depth >= self.config.max_macro_depth:
            raise MacroDepthError(self.config.max_macro_depth)

        synthesis = self.synthesizer.synthesize(instruction, self.macro_model())
        try:
            statements = parse(tokenize(synthesis.dsl))
        except LexError as e:
            logger.error("❌ Macro execution failed: %s", e)
            self.output_log.info("macro error: %s", e)
            return

        self._macro_depth += 1
        try:
            self.run(statements)
        finally:
            self._macro_depth -= 1

    def macro_model(self) -> Optional[Classifier]:
        """Cached macro classifier, else the active one if it is macro-intent, else a one-time load."""
        if self.macro_classifier is not None:
            return self.macro_classifier
        if self.classifier is not None and self.classifier.kind == ModelKind.MACRO_INTENT:
            self.macro_classifier = self.classifier
            return self.macro_classifier
        if self._macro_load_failed:
            return None

        path = self.config.macro_model_path
        try:
            self.macro_classifier = self.classifier_factory(path, self.config)
        except ModelLoadError as e:
            logger.warning("⚠️ Could not load macro model from default path %s: %s", path, e.reason)
            self._macro_load_failed = True
        return self.macro_classifier

    # Expressions

    def eval_expr(self, expr: ast.Expr) -> Value:
        if isinstance(expr, ast.StringLiteral):
            return Text(expr.value)
        if isinstance(expr, ast.ValueRef):
            name = expr.name
            if parse_integer(name) is not None or name in RESERVED_LITERALS:
                return coerce(name)
            value = self.env.get(name)
            return value if value is not None else coerce(name)
        return binary(expr.op, self.eval_expr(expr.left), self.eval_expr(expr.right))

    def eval_bool(self, expr: ast.BoolExpr) -> bool:
        resolve = self.env.resolve

        if isinstance(expr, ast.And):
            # Both sides always run; a classifier call on the right is never skipped.
            left, right = self.eval_bool(expr.left), self.eval_bool(expr.right)
            return left and right
        if isinstance(expr, ast.Or):
            left, right = self.eval_bool(expr.left), self.eval_bool(expr.right)
            return left or right

        if isinstance(expr, (ast.ClassifierEquals, ast.ClassifierNotEquals)):
            label = self._predict(expr.prompt)
            if label is None:
                return False
            equal = texts_equal(label, expr.expected)
            return equal if isinstance(expr, ast.ClassifierEquals) else not equal

        if isinstance(expr, ast.VarEquals):
            return texts_equal(resolve(expr.name), expr.literal)
        if isinstance(expr, ast.VarNotEquals):
            return not texts_equal(resolve(expr.name), expr.literal)
        if isinstance(expr, ast.VarEqualsVar):
            return texts_equal(resolve(expr.left), resolve(expr.right))
        if isinstance(expr, ast.VarNotEqualsVar):
            return not texts_equal(resolve(expr.left), resolve(expr.right))

        order = compare(resolve(expr.left), resolve(expr.right))
        if isinstance(expr, ast.Greater):
            return order > 0
        if isinstance(expr, ast.GreaterEqual):
            return order >= 0
        if isinstance(expr, ast.Less):
            return order < 0
        return order <= 0

    def _predict(self, text: str) -> Optional[str]:
        if self.classifier is None:
            return None
        try:
            return self.classifier.predict(text).strip()
        except ClassifierError as e:
            logger.warning("⚠️ Classifier failed: %s", e)
            return None
