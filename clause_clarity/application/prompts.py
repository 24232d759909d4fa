"""Prompt templates (str.format placeholders).

Two sets: ADVANCED (richer templates with explicit guidelines) and LEGACY
(single-shot prompts). Literal JSON braces are doubled.
"""

from __future__ import annotations

from dataclasses import dataclass

from clause_clarity.domain.services.strategy import PromptSet


@dataclass(frozen=True)
class AnalysisPrompts:
    simplification: str
    risky_terms: str
    legal_references: str


# ===== Advanced set =====

ADVANCED_SIMPLIFICATION = """
You are a legal expert who explains complex legal language to non-lawyers.

Explain the following legal clause in plain English:

Legal Clause: "{clause}"

Requirements:
- Use simple, everyday language
- Explain the practical implications
- Avoid legal jargon
- Be concise but complete
- Focus on what this means for the average person

Simplified Explanation:
"""

ADVANCED_RISKY_TERMS = """
You are a legal risk assessment expert. Identify genuinely problematic terms in the clause below.

Legal Clause: "{clause}"

Guidelines:
- Only report terms that create real legal risk
- If the text is shorter than 15 words or has no legal substance, return an empty array
- Do not force findings
- Focus on indemnification, liability, termination, penalties and similar terms

For each risky term give the exact phrase, a severity (high/moderate/low) and a short explanation.

Return ONLY valid JSON in this exact format:
[
  {{
    "term": "specific legal term or phrase",
    "severity": "high/moderate/low",
    "explanation": "brief explanation of legal risk"
  }}
]

If no risky terms exist, return: []
"""

ADVANCED_LEGAL_REFERENCES = """
You are a legal research expert specialising in Indian law. Identify government articles,
laws or regulations directly relevant to the clause below.

Legal Clause: "{clause}"

Guidelines:
- Only include directly relevant provisions
- If none exist, return an empty array
- Prefer official sources: indiankanoon.org, legislative.gov.in, lawfinderlive.com
- Every URL must be a valid, absolute link

Return ONLY valid JSON in this exact format:
[
  {{
    "title": "Article/Law title",
    "url": "https://official-source-url.com",
    "relevance": "Brief explanation of how this relates to the clause"
  }}
]

If no relevant articles exist, return: []
"""

FULL_CONTEXT_FOLLOWUP = """
You are a helpful legal assistant giving concise answers about legal clauses.

Original Legal Clause: "{clause}"

User's Question: "{question}"

Instructions:
- Answer in 2-3 sentences at most
- Answer only the specific question asked
- Use simple language a non-lawyer understands
- If a yes/no answer fits, start with it
- Stay within the context of the clause

Answer:
"""

SEMANTIC_FOLLOWUP = """
You are a helpful legal assistant giving precise answers about legal clauses using selected context.

RELEVANT CONTEXT (selected by relevance to the question):
{context}

USER'S QUESTION: "{question}"

INSTRUCTIONS:
- Answer in 2-3 sentences at most
- Use ONLY the context above
- If the context is not enough to answer, say so clearly
- Refer to specific parts of the context where useful

ANSWER:
"""

# ===== Legacy set =====

LEGACY_SIMPLIFICATION = """
Analyze and simplify the following legal clause in plain English so that a non-lawyer can
understand it:

"{clause}"

Respond with ONLY the simplified explanation, without any additional text.
"""

LEGACY_RISKY_TERMS = """
Analyze the following legal clause and identify only genuinely problematic terms that could
create legal risks:

"{clause}"

If the text is too short (less than 15 words) or has no legal language, return an empty array.

Format your response strictly as JSON:
[
  {{"term": "phrase", "severity": "high/moderate/low", "explanation": "why it is risky"}}
]

If no risky terms are found, return: []
"""

LEGACY_LEGAL_REFERENCES = """
Analyze the following legal clause and list government articles, laws or regulations it
relates to:

"{clause}"

Only include directly relevant articles with a valid URL to an official source
(indiankanoon.org, legislative.gov.in, lawfinderlive.com).

Format your response strictly as JSON:
[
  {{"title": "Article/Law title", "url": "Official URL", "relevance": "how it relates"}}
]

If none are found, return: []. Do not include any text before or after the JSON array.
"""

LEGACY_FOLLOWUP = """
I previously analyzed this legal clause: "{clause}"

Now I have a follow-up question: "{question}"

Give a CONCISE answer (2-3 sentences maximum), in simple language, starting with yes/no if
the question calls for it. Respond with ONLY the answer.
"""

_ANALYSIS = {
    PromptSet.ADVANCED: AnalysisPrompts(
        simplification=ADVANCED_SIMPLIFICATION,
        risky_terms=ADVANCED_RISKY_TERMS,
        legal_references=ADVANCED_LEGAL_REFERENCES,
    ),
    PromptSet.LEGACY: AnalysisPrompts(
        simplification=LEGACY_SIMPLIFICATION,
        risky_terms=LEGACY_RISKY_TERMS,
        legal_references=LEGACY_LEGAL_REFERENCES,
    ),
}


def analysis_prompts(prompt_set: PromptSet) -> AnalysisPrompts:
    return _ANALYSIS[prompt_set]
