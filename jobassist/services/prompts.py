# jobassist/services/prompts.py
"""
Prompt templates for every generation use case.

Each builder is a pure function of its inputs; the generation client sends the
result as a single user message.
"""

import json
from typing import Any, Dict

CV_SCHEMA = """{
  "personalInfo": {
    "name": "string - full name",
    "email": "string - email address",
    "phone": "string or null",
    "location": "string or null"
  },
  "summary": "string or null - professional summary",
  "experience": [
    {
      "company": "string",
      "position": "string",
      "duration": "string or null - e.g., '2020-2024'",
      "description": "string or null - main responsibilities",
      "achievements": ["string array of key achievements or null"]
    }
  ],
  "education": [
    {
      "institution": "string",
      "degree": "string",
      "field": "string",
      "graduationYear": "string or null"
    }
  ],
  "skills": ["array of skill strings"],
  "certifications": [
    {
      "name": "string",
      "issuer": "string",
      "date": "string or null"
    }
  ]
}"""

TEST_SCHEMA = """{
  "title": "Test title - concise and descriptive",
  "description": "Brief description of what this test covers",
  "questions": [
    {
      "question": "The question text",
      "optionA": "First option",
      "optionB": "Second option",
      "optionC": "Third option",
      "optionD": "Fourth option",
      "correctAnswer": "A",
      "explanation": "Detailed explanation of why this is correct and why others are wrong"
    }
  ]
}"""

DIFFICULTY_INSTRUCTIONS = {
    "easy": "straightforward questions suitable for beginners",
    "medium": "intermediate level questions requiring solid understanding",
    "hard": "advanced questions requiring deep knowledge and experience",
}


def _cv_block(cv: Dict[str, Any]) -> str:
    return json.dumps(cv, indent=2, ensure_ascii=False)


def parse_cv_prompt(cv_text: str) -> str:
    return f"""Extract CV information from this text and structure it as JSON matching our schema exactly.

Text:
{cv_text}

Return ONLY valid JSON matching this exact structure (no markdown, no extra text):
{CV_SCHEMA}

Extract all information. If a section is missing, use empty array for arrays and null for optional fields.
Keep experience, education, and skills as arrays even if there's only one item or none.
Return ONLY the JSON, no other text."""


def review_cv_prompt(cv: Dict[str, Any]) -> str:
    return f"""Review this CV against professional standards and our structure requirements.

CV Data:
{_cv_block(cv)}

Check for:
1. Required fields present (personalInfo, education, skills)
2. Professional language and formatting
3. Use of action verbs in experience descriptions
4. Presence of metrics/achievements
5. All arrays properly formatted

Return ONLY valid JSON (no markdown):
{{
  "isValid": boolean,
  "structureIssues": ["list of missing or malformed structure issues"],
  "styleIssues": ["list of professional/language issues"],
  "recommendations": ["list of improvement recommendations"],
  "summary": "brief overall assessment"
}}

Be constructive. If CV is good, set isValid to true with empty issue arrays.
Return ONLY the JSON, no other text."""


def improve_cv_prompt(cv: Dict[str, Any]) -> str:
    return f"""Improve this CV while maintaining the exact JSON structure. Focus on:
1. Using strong action verbs in experience descriptions
2. Adding metrics and quantifiable achievements
3. Improving professional language
4. Ensuring consistent formatting

Current CV:
{_cv_block(cv)}

Rules:
- KEEP the exact same structure and fields
- KEEP all array items (just improve them)
- ONLY add/improve text content, don't remove fields
- RETURN ONLY valid JSON with same structure

Return the improved CV as JSON ONLY, no markdown or extra text."""


def tailor_cv_prompt(cv: Dict[str, Any], job_brief: str) -> str:
    return f"""Tailor this CV for the specific job description. Reorder and emphasize skills and experience that match the job.

Job Description:
{job_brief}

Current CV:
{_cv_block(cv)}

Tasks:
1. Reorder experience by relevance to the job
2. Highlight matching skills and keywords
3. Adjust descriptions to emphasize relevant achievements
4. KEEP the exact same JSON structure
5. Don't add or remove fields, only improve content

Return ONLY the tailored CV as JSON with the same structure. No markdown or extra text."""


def cv_questions_prompt(cv: Dict[str, Any], job_brief: str) -> str:
    return f"""Generate 5-7 tailored interview questions based on this CV and job description.

Job Description:
{job_brief}

Candidate CV:
{_cv_block(cv)}

Generate questions that:
1. Are specific to their experience in the CV
2. Relate to the job requirements
3. Assess their fit for this role
4. Mix behavioral and technical questions

Return ONLY a JSON array of question strings, NO markdown:
["question 1", "question 2", ...]"""


def interview_prompt(job_role: str, experience_level: str, question_count: int) -> str:
    return f"""Generate {question_count} realistic interview questions for a {job_role} position at {experience_level} experience level.

Create a balanced mix of question types:
- 30% Technical questions (skills, tools, methodologies specific to the role)
- 30% Behavioral questions (past experiences, teamwork, problem-solving)
- 20% Situational questions (hypothetical scenarios)
- 20% Role-specific questions (industry knowledge, best practices)

For each question provide:
1. The question itself (clear and specific)
2. Question type (technical, behavioral, situational, or role-specific)
3. A sample strong answer (2-3 paragraphs showing STAR method for behavioral, detailed technical knowledge for technical questions)
4. Tips for answering (what interviewers are looking for, common mistakes to avoid)

CRITICAL FORMATTING RULES:
- Return ONLY valid, parseable JSON
- Use compact/minified JSON format (no unnecessary whitespace or line breaks)
- All string values MUST be valid JSON strings on a single line
- Never include literal line breaks, tabs, or control characters inside string values
- Write sample answers as continuous text - use periods and spaces, not paragraph breaks
- If you need to show structure in answers, use numbered points like: "1. First point 2. Second point"

Return compact JSON in this structure:
{{
  "jobRole": {json.dumps(job_role)},
  "experienceLevel": {json.dumps(experience_level)},
  "questions": [
    {{
      "question": "The interview question",
      "questionType": "technical",
      "sampleAnswer": "A comprehensive sample answer demonstrating best practices",
      "tips": "Key tips for answering this question effectively"
    }}
  ]
}}

Make questions realistic, relevant to actual {job_role} interviews at {experience_level} level, and ensure they assess different competencies."""


def mock_test_prompt(topic: str, difficulty: str, question_count: int) -> str:
    return f"""Generate a professional mock interview test with {question_count} multiple choice questions.

Topic: {topic}
Difficulty: {difficulty} - {DIFFICULTY_INSTRUCTIONS.get(difficulty, difficulty)}

Create questions that:
1. Test practical knowledge and real-world scenarios
2. Have 4 distinct answer options (A, B, C, D)
3. Include a clear explanation for the correct answer
4. Are relevant to job interviews in this field
5. Progressively test different aspects of the topic

CRITICAL: Return ONLY valid JSON with NO line breaks within string values. All text must be on single lines.

Return this exact JSON structure (no markdown, no extra text, no newlines in strings):
{TEST_SCHEMA}

IMPORTANT: Keep all questions, options, and explanations as single-line text. Make questions engaging and realistic. Ensure correct answers are distributed across all options (A, B, C, D)."""


def role_test_prompt(job_role: str, experience_level: str, question_count: int) -> str:
    return f"""Generate {question_count} interview questions specifically for a {job_role} position with {experience_level} experience level.

Mix question types:
- 40% Technical/Skill-based questions
- 30% Behavioral/Situational questions
- 30% Role-specific knowledge questions

CRITICAL: Return ONLY valid JSON with NO line breaks within string values.

Return this exact JSON structure (no markdown, no extra text, no newlines in strings):
{TEST_SCHEMA}

Make questions realistic and relevant to actual interviews for this role. Keep all text on single lines."""
