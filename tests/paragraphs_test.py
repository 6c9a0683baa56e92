import pytest

from pd_sections.paragraphs import repair_paragraphs


def test_broken_sentence_is_rejoined() -> None:
    lines = ["The employee performs", "complex duties.", "1. First duty"]
    assert repair_paragraphs("\n".join(lines)) == (
        "The employee performs complex duties.\n\n1. First duty"
    )


@pytest.mark.parametrize(
    "content, expected",
    [
        ("Ends here.\nNew start", "Ends here.\n\nNew start"),
        ("Question?\nAnswer!", "Question?\n\nAnswer!"),
        ("(see note)\nnext", "(see note)\n\nnext"),
        ("intro\n- bullet one\n- bullet two", "intro\n\n- bullet one\n\n- bullet two"),
        ("a\n\n\nb", "a b"),
        ("", ""),
    ],
)
def test_paragraph_boundaries(content: str, expected: str) -> None:
    assert repair_paragraphs(content) == expected


def test_repair_is_idempotent() -> None:
    once = repair_paragraphs("one\ntwo.\n2. item\ncontinued")
    assert repair_paragraphs(once) == once
