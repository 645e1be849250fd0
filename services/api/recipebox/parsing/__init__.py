from .parser import RecipeParser, RecipeData, ScoredLine, INSTAGRAM_PLACEHOLDER_TITLE
from .caption_parser import CaptionParser, CaptionParse, CaptionState, parse_instagram_caption
from .jsonld import extract_recipe_from_jsonld, extract_meta_content, collect_strings
from .heuristic import extract_recipe_heuristic, strip_noise
from .scaler import scale_ingredient, scale_ingredients, parse_servings_number

__all__ = [
    "RecipeParser", "RecipeData", "ScoredLine", "INSTAGRAM_PLACEHOLDER_TITLE",
    "CaptionParser", "CaptionParse", "CaptionState", "parse_instagram_caption",
    "extract_recipe_from_jsonld", "extract_meta_content", "collect_strings",
    "extract_recipe_heuristic", "strip_noise",
    "scale_ingredient", "scale_ingredients", "parse_servings_number",
]
