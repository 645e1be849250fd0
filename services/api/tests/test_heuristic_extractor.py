from bs4 import BeautifulSoup

from recipebox.parsing.heuristic import extract_recipe_heuristic, strip_noise

URL = "https://cooking.example.com/stew"


def _extract(html: str):
    return extract_recipe_heuristic(strip_noise(BeautifulSoup(html, "html.parser")), URL)


def test_class_id_and_aria_containers():
    html = """
    <html><head>
      <meta property="og:title" content="Beef Stew">
      <meta name="description" content="Hearty.">
      <meta property="og:image" content="https://img.example/stew.jpg">
    </head><body>
      <h1>Ignored heading</h1>
      <ul class="wprm-recipe-Ingredients"><li>1 kg beef</li><li>  </li><li>2 carrots</li></ul>
      <div aria-label="Ingredient list"><ul><li>1 onion</li></ul></div>
      <ol id="recipe-directions"><li>Brown the   beef.</li></ol>
      <div class="method-steps"><p>Simmer 2 hours.</p></div>
    </body></html>
    """
    recipe = _extract(html)

    assert recipe.title == "Beef Stew"
    assert recipe.description == "Hearty."
    assert recipe.images == ["https://img.example/stew.jpg"]
    assert recipe.ingredients == ["1 kg beef", "2 carrots", "1 onion"]
    assert recipe.instructions == ["Brown the beef.", "Simmer 2 hours."]
    assert recipe.source_url == URL


def test_title_falls_back_to_h1_then_hostname():
    assert _extract("<html><body><h1> Soup </h1></body></html>").title == "Soup"
    assert _extract("<html><body><p>nothing</p></body></html>").title == "cooking.example.com"


def test_noise_is_removed_before_matching():
    html = """
    <html><body>
      <nav class="ingredient-nav"><ul><li>Menu item</li></ul></nav>
      <ul class="ingredients"><li>salt</li></ul>
      <footer><ul class="steps"><li>Subscribe</li></ul></footer>
    </body></html>
    """
    recipe = _extract(html)
    assert recipe.ingredients == ["salt"]
    assert recipe.instructions == []


def test_empty_page_is_a_valid_result():
    recipe = _extract("<html><body><p>Hello</p></body></html>")
    assert recipe.ingredients == []
    assert recipe.instructions == []
    assert recipe.title
    assert recipe.description is None
    assert recipe.images == []
