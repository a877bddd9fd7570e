RECIPE_SYSTEM_PROMPT = (
    "You are a helpful cooking assistant. When generating recipes, always format "
    "your response as a JSON object with the following structure: "
    '{"title": "Recipe Name", "ingredients": ["ingredient 1", "ingredient 2", ...], '
    '"instructions": ["step 1", "step 2", ...], "prepTime": "X minutes", '
    '"cookTime": "X minutes", "servings": "X"}.'
)

CHAT_SYSTEM_PROMPT = (
    "You are a helpful cooking assistant. "
    "For chat responses, just provide helpful cooking advice as plain text."
)


class CreateRecipePrompt:
    def __init__(self, ingredients: str, dietary: str = "", cuisine: str = "") -> None:
        self.ingredients = ingredients
        self.dietary = dietary
        self.cuisine = cuisine

    def __str__(self) -> str:
        lines = [f"Create a recipe using these ingredients: {self.ingredients}."]
        if self.dietary:
            lines.append(f"Dietary preference: {self.dietary}.")
        if self.cuisine:
            lines.append(f"Cuisine style: {self.cuisine}.")
        lines.append(
            "Please provide a complete recipe with ingredients list "
            "and step-by-step instructions."
        )
        return "\n".join(lines)


class CookingQuestionPrompt:
    def __init__(self, question: str, recipe_title: str | None = None) -> None:
        self.question = question
        self.recipe_title = recipe_title

    def __str__(self) -> str:
        lines = [f"Answer this cooking question: {self.question}."]
        if self.recipe_title:
            lines.append(f"Context: User is working with this recipe: {self.recipe_title}")
        lines.append("Provide helpful, practical cooking advice.")
        return "\n".join(lines)
