"""
Operator-editable pending statements.

The operator may rewrite any generated statement before committing. Edited
text is kept per statement for as long as the number of generated
statements stays the same; adding or removing a pending change resets all
edits to the freshly generated text.
"""

from tabledit.exceptions import InvalidArgumentError
from tabledit.synthesizer import StatementKind, classify_statement


class PendingStatements:
    def __init__(self):
        self._generated: list[str] = []
        self._overrides: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._generated)

    def sync(self, generated: list[str]) -> None:
        """Adopt newly generated statements, keeping edits if the count is unchanged."""
        if len(generated) != len(self._generated):
            self._overrides.clear()
        self._generated = list(generated)

    def edit(self, index: int, text: str) -> None:
        if not 0 <= index < len(self._generated):
            raise InvalidArgumentError(
                f"Statement index {index} out of range for {len(self._generated)} statement(s)"
            )
        if text == self._generated[index]:
            self._overrides.pop(index, None)
        else:
            self._overrides[index] = text

    def is_edited(self, index: int) -> bool:
        return index in self._overrides

    def reset(self) -> None:
        """Drop every operator edit."""
        self._overrides.clear()

    def clear(self) -> None:
        self._generated = []
        self._overrides.clear()

    @property
    def statements(self) -> list[str]:
        """Text to commit: operator edits where present, generated text elsewhere."""
        return [self._overrides.get(i, text) for i, text in enumerate(self._generated)]

    def items(self) -> list[tuple[str, StatementKind]]:
        return [(text, classify_statement(text)) for text in self.statements]
