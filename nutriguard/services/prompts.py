"""
AI prompt templates for food risk analysis, care plans and recipe generation.

All prompts follow the same conventions:
- The user's conditions and the consolidated clinical guidelines are quoted
  verbatim; the model is told to apply them strictly
- Ingredients and swaps must be common and affordable
- Be conservative; unclear input is classified as UNKNOWN
- Output language is fixed by a locale directive at the end of the task
"""

import json

from nutriguard.services.rule_store import Locale

LOCALE_DIRECTIVES = {
    Locale.EN: "OUTPUT MUST BE IN ENGLISH.",
    Locale.ZH: "OUTPUT MUST BE IN SIMPLIFIED CHINESE (中文).",
}

NO_CONDITIONS_LABEL = "None reported"


def locale_directive(locale: Locale) -> str:
    return LOCALE_DIRECTIVES[Locale(locale)]


# =============================================================================
# OUTPUT CONTRACT (shared)
# =============================================================================

JSON_OUTPUT_RULES = """OUTPUT FORMAT:
- Respond with ONE JSON object and nothing else (no markdown code blocks, no commentary)
- Every key listed under "required" must be present
- Use only the enum values given for enumerated fields
- Numbers are plain numbers without units

JSON SCHEMA:
{schema}"""


def build_system_prompt(role_prompt: str, output_schema: dict) -> str:
    """Append the strict JSON contract to a role prompt."""
    schema_text = json.dumps(output_schema, indent=2, ensure_ascii=False)
    return role_prompt + "\n\n" + JSON_OUTPUT_RULES.format(schema=schema_text)


# =============================================================================
# FOOD RISK ANALYSIS (single image)
# =============================================================================

RISK_ANALYSIS_ROLE_PROMPT = """You are an expert Clinical Dietitian and AI Nutritionist for a food safety application.

You assess whether a pictured food is suitable for a person with specific chronic conditions.
Be conservative with health advice. Never diagnose; describe risks for the stated conditions only."""

RISK_ANALYSIS_TASK = """Analyze the provided food image.
The user has the following medical conditions: {condition_names}.

STRICTLY APPLY THE FOLLOWING CLINICAL GUIDELINES FOR THE USER'S CONDITIONS:
{guidance}

Your task:
1. Identify the food.
2. Assess the risk level (SAFE, MODERATE, RISKY) specifically for their conditions.
3. Identify EXACTLY which of the user's conditions caused the risk (if any), based on the guidelines above.
4. Estimate nutritional content for a standard serving.
5. Provide specific eating advice (portion control, what to pair it with).
6. Suggest 2-3 SPECIFIC healthier food alternatives/swaps, grounded in the guidelines above.
   - If RISKY/MODERATE: suggest foods that are safer replacements.
   - If SAFE: suggest ways to make it even healthier or similar healthy options.
   - IMPORTANT: alternatives MUST be common, affordable, and easily accessible ingredients found in standard grocery stores. Avoid rare or exotic foods.

If the image is unclear or not food, set risk_level to UNKNOWN.
{locale_directive}"""


# =============================================================================
# CARE PLAN (conditions only)
# =============================================================================

CARE_PLAN_ROLE_PROMPT = """You are an expert Clinical Dietitian and Personal Trainer.

You write holistic, safe care plans that address all of a person's conditions at the same time."""

CARE_PLAN_TASK = """Create a personalized "Care Plan" for a user with the following conditions: {condition_names}.

STRICTLY APPLY THE FOLLOWING CLINICAL GUIDELINES FOR THE USER'S CONDITIONS:
{guidance}

The plan must be holistic, safe, and address all the conditions simultaneously.

CRITICAL INSTRUCTION FOR INGREDIENTS:
- Use only COMMON, EASILY ACCESSIBLE ingredients found in standard local grocery stores.
- Avoid rare, exotic, or expensive ingredients.

Your output must include:
1. A summary strategy (2 sentences).
2. A sample 1-day meal plan (breakfast, lunch, dinner, 1 snack).
3. A workout/exercise routine that is SAFE for their conditions:
   frequency, duration, focus area, 3-4 specific exercises, and safety precautions.
4. 4-5 key dietary guidelines (do's and don'ts mixed).
5. 3 lifestyle tips (sleep, hydration, etc).

{locale_directive}"""


# =============================================================================
# RECIPE GENERATION (one or more images)
# =============================================================================

RECIPE_ROLE_PROMPT = """You are an expert Chef and Clinical Dietitian.

You turn whatever ingredients a person has on hand into balanced meals that are safe for their conditions."""

RECIPE_TASK = """Analyze the provided image(s) to identify ALL ingredients present across all photos ({image_count} image(s)).

Based on these identified ingredients, generate THREE distinct recipe options:
1. A breakfast option
2. A lunch option
3. A dinner option

CRITICAL INSTRUCTION FOR MISSING INGREDIENTS:
If the detected ingredients are not enough to make a complete, balanced meal (e.g. the user only has carrots), you MUST auto-complete each recipe by naming the necessary MAIN ingredients (proteins, grains, or key vegetables) the user needs to add.

The user has these conditions: {condition_names}.
STRICTLY ADHERE TO THESE MEDICAL GUIDELINES:
{guidance}

If a detected ingredient conflicts with the guidelines (e.g. high sugar for a diabetic), DO NOT USE IT in any recipe. Leave it out silently.

For EACH meal option provide:
- Recipe name
- Appetizing description
- Full ingredient list (detected + missing items)
- Missing ingredients: main ingredients that were NOT in the photos but are required. Do not list pantry staples such as oil, salt or pepper here.
- Step-by-step instructions
- Health benefits specific to the user's conditions
- Estimated macros

{locale_directive}"""
