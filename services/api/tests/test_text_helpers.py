from recipebox.core.text import (
    collapse_whitespace,
    is_emoji_only,
    normalize_keycaps,
    split_into_sentences,
    strip_bullet,
    strip_leading_emoji,
    strip_step_number,
    strip_title_decoration,
)


def test_strip_leading_emoji():
    assert strip_leading_emoji("\U0001F525 Crispy tofu") == "Crispy tofu"
    assert strip_leading_emoji("Crispy \U0001F525 tofu") == "Crispy \U0001F525 tofu"


def test_strip_title_decoration():
    assert strip_title_decoration("✨ Lemon Cake ✨") == "Lemon Cake"
    assert strip_title_decoration("**Best Brownies**") == "Best Brownies"
    assert strip_title_decoration("⭐️") == ""


def test_strip_bullet_and_step_number():
    assert strip_bullet("• 2 eggs") == "2 eggs"
    assert strip_bullet("- 1 cup milk") == "1 cup milk"
    assert strip_bullet("1 cup milk") == "1 cup milk"
    assert strip_step_number("1. Mix") == "Mix"
    assert strip_step_number("Step 2: Bake") == "Bake"
    assert strip_step_number("3) Serve") == "Serve"
    assert strip_step_number("Mix well") == "Mix well"


def test_split_into_sentences():
    text = "Heat the oil. Add the onions and fry. Serve hot! Enjoy it?  ok."
    assert split_into_sentences(text) == [
        "Heat the oil.",
        "Add the onions and fry.",
        "Serve hot!",
        "Enjoy it?",
    ]


def test_split_into_sentences_swedish_capitals():
    text = "Stek löken mjuk. Ärtorna tillsätts sist."
    assert split_into_sentences(text) == ["Stek löken mjuk.", "Ärtorna tillsätts sist."]


def test_split_keeps_decimal_and_lowercase_continuations():
    text = "Add 1.5 dl cream. then stir."
    assert split_into_sentences(text) == ["Add 1.5 dl cream. then stir."]


def test_keycaps_become_step_numbers():
    assert normalize_keycaps("1️⃣ Mix") == "1. Mix"
    assert normalize_keycaps("2⃣ Bake") == "2. Bake"


def test_emoji_only_and_whitespace():
    assert is_emoji_only("\U0001F60D\U0001F60D  ")
    assert not is_emoji_only("\U0001F60D yum")
    assert collapse_whitespace("  a \n b\t c ") == "a b c"
