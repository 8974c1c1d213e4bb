# jobassist/services/llm_adapters/mock_adapter.py
"""
Deterministic mock adapter to mimic the generation service for development and CI.

Replies are wrapped in ```json fences the way the hosted model usually answers,
so the cleaning step is exercised too. Content depends only on stage + payload.
"""

import asyncio
import copy
import hashlib
import json
import re
from typing import Any, Dict

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PHONE_RE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
LETTERS = "ABCD"


def _fence(obj: Any) -> str:
    return "```json\n" + json.dumps(obj, ensure_ascii=False) + "\n```"


def _seed(stage: str, payload: Dict[str, Any]) -> int:
    s = json.dumps({"stage": stage, "payload": payload}, sort_keys=True, default=str)
    return int(hashlib.sha256(s.encode("utf-8")).hexdigest()[:8], 16)


def _parse_cv(payload: Dict[str, Any]) -> Dict[str, Any]:
    text = payload.get("cv_text", "")
    lines = [l.strip() for l in text.splitlines() if l.strip()]
    email = EMAIL_RE.search(text)
    phone = PHONE_RE.search(text)
    return {
        "personalInfo": {
            "name": lines[0] if lines else "Unknown Candidate",
            "email": email.group(0) if email else "unknown@example.com",
            "phone": phone.group(0) if phone else None,
            "location": None,
        },
        "summary": " ".join(lines[1:3]) or None,
        "experience": [
            {
                "company": "ACME",
                "position": "Analyst",
                "duration": "2019-2022",
                "description": lines[1] if len(lines) > 1 else None,
                "achievements": [],
            }
        ],
        "education": [
            {"institution": "State University", "degree": "BSc", "field": "Computer Science", "graduationYear": "2018"}
        ],
        "skills": ["SQL", "Python"] if ("SQL" in text or "Python" in text) else ["Communication"],
        "certifications": [],
    }


def _review(payload: Dict[str, Any]) -> Dict[str, Any]:
    cv = payload.get("cv", {})
    structure = []
    for section in ("personalInfo", "education", "skills"):
        if not cv.get(section):
            structure.append(f"Missing {section}")
    return {
        "isValid": not structure,
        "structureIssues": structure,
        "styleIssues": [],
        "recommendations": ["Quantify achievements with metrics"],
        "summary": "Solid CV" if not structure else "CV needs structural fixes",
    }


def _improve(payload: Dict[str, Any]) -> Dict[str, Any]:
    cv = copy.deepcopy(payload.get("cv", {}))
    summary = cv.get("summary") or ""
    cv["summary"] = ("Results-driven professional. " + summary).strip()
    cv["improvements"] = ["Strengthened summary wording"]
    return cv


def _tailor(payload: Dict[str, Any]) -> Dict[str, Any]:
    cv = copy.deepcopy(payload.get("cv", {}))
    brief = payload.get("job_brief", "").lower()
    skills = cv.get("skills") or []
    # skills mentioned in the brief first
    cv["skills"] = sorted(skills, key=lambda s: 0 if str(s).lower() in brief else 1)
    return cv


def _cv_questions(payload: Dict[str, Any]) -> list:
    brief = payload.get("job_brief", "this role")
    return [
        f"What draws you to {brief[:60]}?",
        "Tell me about the project you are most proud of.",
        "Describe a time you resolved a conflict within your team.",
        "Which of your skills is most relevant to this position and why?",
        "How do you keep your technical knowledge current?",
    ]


def _interview(payload: Dict[str, Any], seed: int) -> Dict[str, Any]:
    role = payload.get("job_role", "Engineer")
    level = payload.get("experience_level", "mid")
    kinds = ["technical", "behavioral", "situational", "role-specific"]
    questions = []
    for i in range(int(payload.get("question_count", 5))):
        kind = kinds[(seed + i) % len(kinds)]
        questions.append({
            "question": f"{role} question {i + 1}: describe your approach to a {kind} challenge.",
            "questionType": kind,
            "sampleAnswer": f"A strong {level} candidate explains context, action and result.",
            "tips": "Be specific and quantify the outcome.",
        })
    return {"jobRole": role, "experienceLevel": level, "questions": questions}


def _test(payload: Dict[str, Any], seed: int) -> Dict[str, Any]:
    topic = payload.get("topic") or payload.get("job_role", "General")
    questions = []
    for i in range(int(payload.get("question_count", 5))):
        letter = LETTERS[(seed + i) % 4]
        questions.append({
            "question": f"{topic} question {i + 1}?",
            "optionA": "Option A",
            "optionB": "Option B",
            "optionC": "Option C",
            "optionD": "Option D",
            "correctAnswer": letter,
            "explanation": f"Option {letter} is correct.",
        })
    return {
        "title": f"{topic} Mock Test",
        "description": f"{payload.get('difficulty', 'medium')} level questions on {topic}",
        "questions": questions,
    }


async def complete(stage: str, prompt: str, payload: Dict[str, Any], max_tokens: int = 4096) -> str:
    await asyncio.sleep(0)  # keep async signature
    seed = _seed(stage, payload)
    if stage == "CV_PARSE":
        return _fence(_parse_cv(payload))
    if stage == "CV_REVIEW":
        return _fence(_review(payload))
    if stage == "CV_IMPROVE":
        return _fence(_improve(payload))
    if stage == "CV_TAILOR":
        return _fence(_tailor(payload))
    if stage == "CV_QUESTIONS":
        return _fence(_cv_questions(payload))
    if stage == "INTERVIEW":
        return _fence(_interview(payload, seed))
    if stage in ("MOCK_TEST", "ROLE_TEST"):
        return _fence(_test(payload, seed))
    # default fallback
    return _fence({"stage": stage, "seed": seed})
