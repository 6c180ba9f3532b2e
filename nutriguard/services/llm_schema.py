"""
Output schemas sent with each inference request.

Plain JSON-schema dicts: every object lists its required keys, and risk_level
is a closed enum. The pydantic models in ai_schemas.py validate what comes
back against the same shapes.
"""

RISK_LEVEL_ENUM = ["SAFE", "MODERATE", "RISKY", "UNKNOWN"]

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

ANALYSIS_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "food_name": {"type": "string"},
        "risk_level": {"type": "string", "enum": RISK_LEVEL_ENUM},
        "risk_reason": {
            "type": "string",
            "description": "A short concise sentence explaining the main risk or benefit.",
        },
        "triggered_conditions": {
            **_STRING_LIST,
            "description": (
                "Names of the user's conditions that make this food risky. "
                "Empty if SAFE."
            ),
        },
        "detailed_analysis": {
            "type": "string",
            "description": "A paragraph explaining why this is good or bad given the conditions.",
        },
        "portion_recommendation": {
            "type": "string",
            "description": "Specific quantity advice, e.g. '1/2 cup max'.",
        },
        "alternatives": {
            "type": "array",
            "description": "2-3 specific healthier alternative foods.",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "reason": {
                        "type": "string",
                        "description": "Why this is a better choice for the user's conditions.",
                    },
                },
                "required": ["name", "reason"],
            },
        },
        "nutrients": {
            "type": "object",
            "description": "Estimate for one standard serving.",
            "properties": {
                "calories": {"type": "number", "description": "kcal"},
                "carbs": {"type": "number", "description": "g"},
                "protein": {"type": "number", "description": "g"},
                "fat": {"type": "number", "description": "g"},
                "sugar": {"type": "number", "description": "g"},
                "sodium": {"type": "number", "description": "mg"},
            },
            "required": ["calories", "carbs", "protein", "fat", "sugar", "sodium"],
        },
    },
    "required": [
        "food_name",
        "risk_level",
        "risk_reason",
        "triggered_conditions",
        "detailed_analysis",
        "portion_recommendation",
        "alternatives",
        "nutrients",
    ],
}


DIET_PLAN_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {"type": "string", "description": "Two-sentence strategy."},
        "meals": {
            "type": "object",
            "properties": {
                "breakfast": {"type": "string"},
                "lunch": {"type": "string"},
                "dinner": {"type": "string"},
                "snacks": {"type": "string"},
            },
            "required": ["breakfast", "lunch", "dinner", "snacks"],
        },
        "workout": {
            "type": "object",
            "properties": {
                "frequency": {"type": "string", "description": "e.g. 3-4 times/week"},
                "avg_duration": {"type": "string", "description": "e.g. 30 mins"},
                "focus": {"type": "string", "description": "e.g. Low Impact Cardio"},
                "exercises": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "duration_or_reps": {"type": "string"},
                            "benefit": {"type": "string"},
                        },
                        "required": ["name", "duration_or_reps", "benefit"],
                    },
                },
                "precautions": _STRING_LIST,
            },
            "required": ["frequency", "avg_duration", "focus", "exercises", "precautions"],
        },
        "guidelines": _STRING_LIST,
        "lifestyle": _STRING_LIST,
    },
    "required": ["summary", "meals", "workout", "guidelines", "lifestyle"],
}


RECIPE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "description": {"type": "string"},
        "ingredients": _STRING_LIST,
        "missing_ingredients": {
            **_STRING_LIST,
            "description": (
                "MAIN ingredients required for this recipe that were NOT found "
                "in the user's photos."
            ),
        },
        "instructions": _STRING_LIST,
        "health_benefits": {"type": "string"},
        "macros_estimate": {
            "type": "object",
            "properties": {
                "calories": {"type": "number"},
                "protein": {"type": "number"},
                "carbs": {"type": "number"},
                "fat": {"type": "number"},
            },
            "required": ["calories", "protein", "carbs", "fat"],
        },
    },
    "required": [
        "name",
        "description",
        "ingredients",
        "missing_ingredients",
        "instructions",
        "health_benefits",
        "macros_estimate",
    ],
}

CHEF_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "identified_ingredients": {
            **_STRING_LIST,
            "description": "Ingredients recognized across all images.",
        },
        "breakfast": RECIPE_SCHEMA,
        "lunch": RECIPE_SCHEMA,
        "dinner": RECIPE_SCHEMA,
    },
    "required": ["identified_ingredients", "breakfast", "lunch", "dinner"],
}
