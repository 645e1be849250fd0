import pytest

from recipebox.parsing.caption_parser import (
    CaptionParser,
    CaptionState,
    HeaderKind,
    INGREDIENT_HEADER_RE,
    INSTRUCTION_HEADER_RE,
    _StateLog,
    clean_caption_lines,
    extract_servings_line,
    match_header,
    parse_instagram_caption,
    strip_username,
    take_paren_servings,
)
from recipebox.parsing.parser import INSTAGRAM_PLACEHOLDER_TITLE

URL = "https://www.instagram.com/p/ABC123/"


def _parse(caption: str):
    return CaptionParser().parse_with_trace(caption, URL)


# --- Preprocessing ---

def test_clean_caption_drops_junk_and_hashtag_walls():
    raw = (
        "  Lemon Pasta  \n"
        "\n"
        "View all 52 comments\n"
        "Link in bio!\n"
        "#pasta #dinner #easy\n"
        "❤️❤️\n"
        "#ad #sponsored #yum great\n"
        "#tip add salt to the water before boiling\n"
        "Macros: 500 kcal\n"
    )
    assert clean_caption_lines(raw) == [
        "Lemon Pasta",
        "#tip add salt to the water before boiling",
    ]


def test_strip_username_only_with_more_lines():
    assert strip_username(["chef_anna", "Lemon Pasta"]) == ["Lemon Pasta"]
    assert strip_username(["chef_anna"]) == ["chef_anna"]
    assert strip_username(["Lemon Pasta", "1 cup rice"]) == ["Lemon Pasta", "1 cup rice"]


def test_extract_servings_line_takes_first_match():
    servings, lines = extract_servings_line(["Soup", "4-6 portioner.", "2 servings", "1 dl milk"])
    assert servings == "4-6 portioner"
    assert lines == ["Soup", "2 servings", "1 dl milk"]


def test_take_paren_servings():
    assert take_paren_servings("Kycklinggryta (6 portioner)") == ("6 portioner", "Kycklinggryta")
    assert take_paren_servings("Soup (serves everyone)") == (None, "Soup (serves everyone)")


# --- Header detection ---

@pytest.mark.parametrize(
    "line, pattern, expected",
    [
        ("Ingredients", INGREDIENT_HEADER_RE, (HeaderKind.BLOCK, "")),
        ("INGREDIENSER:", INGREDIENT_HEADER_RE, (HeaderKind.BLOCK, "")),
        ("🛒 Ingredients (serves 2):", INGREDIENT_HEADER_RE, (HeaderKind.BLOCK, "")),
        ("Ingredients for 4 people:", INGREDIENT_HEADER_RE, (HeaderKind.BLOCK, "")),
        ("Ingredients• 1 can tomatoes", INGREDIENT_HEADER_RE, (HeaderKind.INLINE, "• 1 can tomatoes")),
        ("Ingredients: 2 eggs", INGREDIENT_HEADER_RE, (HeaderKind.INLINE, "2 eggs")),
        ("Instructions1. Preheat", INSTRUCTION_HEADER_RE, (HeaderKind.INLINE, "1. Preheat")),
        ("Gör så här:", INSTRUCTION_HEADER_RE, (HeaderKind.BLOCK, "")),
        ("Methodology matters", INSTRUCTION_HEADER_RE, None),
        ("Steps to happiness", INSTRUCTION_HEADER_RE, None),
        ("Ingredient quality matters a lot here", INGREDIENT_HEADER_RE, None),
    ],
)
def test_match_header(line, pattern, expected):
    assert match_header(line, pattern) == expected


def test_state_log_rejects_illegal_transition():
    log = _StateLog()
    with pytest.raises(RuntimeError):
        log.advance(CaptionState.CLUSTER_SPLIT)


# --- Strategy A ---

def test_header_segmentation():
    parsed = _parse("My Pasta\nIngredients\n1 cup flour\n2 eggs\nInstructions\n1. Mix\n2. Bake")
    recipe = parsed.recipe

    assert recipe.title == "My Pasta"
    assert recipe.ingredients == ["1 cup flour", "2 eggs"]
    assert recipe.instructions == ["Mix", "Bake"]
    assert recipe.images == []
    assert recipe.source_url == URL
    assert parsed.states == [
        CaptionState.PREPROCESS,
        CaptionState.HEADER_SEGMENTATION,
        CaptionState.DONE,
    ]


def test_header_segmentation_with_noise():
    caption = (
        "chef_anna\n"
        "Creamy Pasta\n"
        "4 servings.\n"
        "Ingredients:\n"
        "• 200 g pasta\n"
        "- 1 dl cream\n"
        "#pasta #dinner #easy\n"
        "Instructions:\n"
        "Step 1: Boil pasta.\n"
        "2) Add cream.\n"
        "View all 52 comments\n"
        "❤️❤️"
    )
    recipe = parse_instagram_caption(caption, URL)

    assert recipe.title == "Creamy Pasta"
    assert recipe.servings == "4 servings"
    assert recipe.ingredients == ["200 g pasta", "1 dl cream"]
    assert recipe.instructions == ["Boil pasta.", "Add cream."]


def test_paren_servings_removed_from_title():
    caption = (
        "Kycklinggryta (6 portioner)\n"
        "Ingredienser\n"
        "500 g kyckling\n"
        "2 dl grädde\n"
        "Gör så här\n"
        "Stek kycklingen.\n"
        "Häll på grädden."
    )
    recipe = parse_instagram_caption(caption, URL)

    assert recipe.title == "Kycklinggryta"
    assert recipe.servings == "6 portioner"
    assert recipe.ingredients == ["500 g kyckling", "2 dl grädde"]
    assert recipe.instructions == ["Stek kycklingen.", "Häll på grädden."]


def test_title_length_ignores_paren_servings():
    caption = (
        "Pasta Bake (6 portioner)\n"
        "Great for weeknights\n"
        "Ingredients\n"
        "400 g pasta\n"
        "2 dl cream\n"
        "Instructions\n"
        "Boil the pasta.\n"
        "Bake with cream."
    )
    recipe = parse_instagram_caption(caption, URL)

    assert recipe.title == "Pasta Bake"
    assert recipe.servings == "6 portioner"
    assert recipe.description == "Great for weeknights"


def test_shortest_plain_line_is_title():
    caption = (
        "OMG you NEED to try this!!!\n"
        "@friend made it first\n"
        "Lemon Bars\n"
        "🍋 The easiest dessert for summer parties\n"
        "Ingredients\n"
        "3 lemons\n"
        "1 cup sugar"
    )
    recipe = parse_instagram_caption(caption, URL)

    assert recipe.title == "Lemon Bars"
    assert recipe.description == "OMG you NEED to try this!!!\nThe easiest dessert for summer parties"
    assert recipe.ingredients == ["3 lemons", "1 cup sugar"]
    assert recipe.instructions == []


def test_header_first_uses_placeholder_title():
    recipe = parse_instagram_caption("Ingredients:\n1 cup rice\nMethod:\nCook the rice", URL)
    assert recipe.title == INSTAGRAM_PLACEHOLDER_TITLE
    assert recipe.ingredients == ["1 cup rice"]
    assert recipe.instructions == ["Cook the rice"]


def test_inline_headers_stop_steps_at_first_non_step_line():
    caption = (
        "Tomato Soup\n"
        "Ingredients• 1 can tomatoes\n"
        "• 1 onion\n"
        "Instructions1. Preheat the oven\n"
        "2. Blend everything\n"
        "#ad this soup was made with our partner brand\n"
        "3. Buy the partner blender"
    )
    recipe = parse_instagram_caption(caption, URL)

    assert recipe.ingredients == ["1 can tomatoes", "1 onion"]
    assert recipe.instructions == ["Preheat the oven", "Blend everything"]


def test_block_headers_skip_non_step_lines():
    caption = (
        "Tomato Soup\n"
        "Instructions\n"
        "1. Preheat the oven\n"
        "#ad this soup was made with our partner brand\n"
        "2. Blend everything"
    )
    recipe = parse_instagram_caption(caption, URL)
    assert recipe.instructions == ["Preheat the oven", "Blend everything"]


def test_instructions_before_ingredients():
    caption = "Quick Rice\nMethod\nCook the rice\nIngredients\n1 cup rice"
    recipe = parse_instagram_caption(caption, URL)
    assert recipe.instructions == ["Cook the rice"]
    assert recipe.ingredients == ["1 cup rice"]


# --- Strategy B ---

def test_cluster_from_score_based_fallback():
    parsed = _parse(
        "Yummy Bowl\n1 cup rice\n2 tbsp soy sauce\n1 egg\n"
        "Heat oil in a pan and stir fry the rice with soy sauce for 5 minutes."
    )
    recipe = parsed.recipe

    assert recipe.title == "Yummy Bowl"
    assert recipe.ingredients == ["1 cup rice", "2 tbsp soy sauce", "1 egg"]
    assert recipe.instructions == [
        "Heat oil in a pan and stir fry the rice with soy sauce for 5 minutes."
    ]
    assert parsed.states == [
        CaptionState.PREPROCESS,
        CaptionState.SCORE_CLASSIFICATION,
        CaptionState.CLUSTER_SPLIT,
        CaptionState.DONE,
    ]


def test_cluster_extends_over_short_lines_and_splits_long_steps():
    caption = (
        "Lovely dinner tonight with friends\n"
        "✨ GARLIC NOODLES ✨\n"
        "200 g noodles\n"
        "3 cloves garlic\n"
        "2 tbsp butter\n"
        "salt\n"
        "First boil the noodles in salted water for 8 minutes. Meanwhile melt the butter "
        "in a pan and fry the garlic until golden. Toss everything together and serve."
    )
    recipe = parse_instagram_caption(caption, URL)

    assert recipe.title == "GARLIC NOODLES"
    assert recipe.ingredients == ["200 g noodles", "3 cloves garlic", "2 tbsp butter", "salt"]
    assert recipe.instructions == [
        "First boil the noodles in salted water for 8 minutes.",
        "Meanwhile melt the butter in a pan and fry the garlic until golden.",
        "Toss everything together and serve.",
    ]


def test_line_sweep_without_cluster():
    parsed = _parse(
        "Quick Snack\n"
        "- apples\n"
        "- peanut butter\n"
        "1. Slice the apples\n"
        "2. Spread the butter on each slice\n"
        "Such a great after school treat for the kids"
    )
    recipe = parsed.recipe

    assert recipe.title == "Quick Snack"
    assert recipe.ingredients == ["apples", "peanut butter"]
    assert recipe.instructions == ["Slice the apples", "Spread the butter on each slice"]
    assert recipe.description == "Such a great after school treat for the kids"
    assert parsed.states[-2] is CaptionState.LINE_SWEEP


def test_empty_caption_still_has_title():
    recipe = parse_instagram_caption("#food #yum\n❤️", URL)
    assert recipe.title == INSTAGRAM_PLACEHOLDER_TITLE
    assert recipe.ingredients == []
    assert recipe.instructions == []
