JOB_TEXT = """Title: {title}
Description: {description}
Requirements: {requirements}
"""

CANDIDATE_PROFILE = """Name: {name}
Email: {email}
LinkedIn: {linkedin}
Skills: {skills}
Experience: {experience}
Resume Text: {resume_text}
"""

# Text embedded for the vector index (no contact details)
CANDIDATE_INDEX_TEXT = """Name: {name}
Skills: {skills}
Experience: {experience}
Resume: {resume_text}
"""

EVALUATION_PROMPT = """You are an expert AI talent evaluator with years of experience in technical recruiting.

JOB DESCRIPTION:
{job_text}

CANDIDATE PROFILE:
{candidate_profile}

Evaluate how well this candidate's skills, experience and background match the requirements for this position.

Provide:
1. A score from 0-100 for the overall match between the candidate and the job (be realistic and nuanced).
2. Detailed feedback (3-4 paragraphs) covering the candidate's key strengths for this role,
   where they meet or exceed expectations, gaps, and an overall fit assessment.
3. Specific recommendations as bullet points: skills to develop, how to position themselves
   for this type of role, and any other constructive suggestions.

Return ONLY a JSON object in exactly this format:

{{
  "score": <number between 0-100>,
  "feedback": "<detailed feedback>",
  "recommendations": "<recommendations as bullet points>"
}}
"""

RERANK_CANDIDATE = """
CANDIDATE {position}:
ID: {id}
Name: {name}
Skills: {skills}
Experience: {experience}
Resume Text: {resume_excerpt}
"""

RERANK_PROMPT = """You are an expert HR recruiter evaluating candidate resumes against job requirements.

JOB REQUIREMENTS:
{requirements}

CANDIDATES:
{candidates}

Rank these candidates by their match to the job requirements. For each candidate give:
1. A match score from 0.0 to 1.0 (higher is better)
2. A brief explanation of why they match or don't match

Return ONLY valid JSON in exactly this format:
{{
  "rankings": [
    {{
      "id": 1,
      "score": 0.95,
      "explanation": "Explanation text here"
    }}
  ]
}}
"""

DEFAULT_REQUIREMENTS = "General skills and experience relevant to this role"
