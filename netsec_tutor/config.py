"""
Configuration settings for the Network Security Tutor.

All tunable parameters live here as module-level constants so the
ingestion, retrieval and quiz code share one set of values.
"""

from pathlib import Path

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Base directory (where this project lives)
BASE_DIR = Path(__file__).parent.parent

# Course documents (lecture notes, homework) loaded at startup
DOCS_DIR = BASE_DIR / "public"

# File extensions picked up by directory ingestion
SUPPORTED_EXTENSIONS = (".pdf", ".txt")

# =============================================================================
# CHUNKING CONFIGURATION
# =============================================================================

# Chunk size in WORDS (not characters)
CHUNK_SIZE = 500

# Overlap between consecutive chunks in words
CHUNK_OVERLAP = 50

# =============================================================================
# EMBEDDING CONFIGURATION
# =============================================================================

# sentence-transformers model; creates 384-dimensional vectors
EMBEDDING_MODEL = "all-MiniLM-L6-v2"

EMBEDDING_DIMENSION = 384

# =============================================================================
# OLLAMA CONFIGURATION
# =============================================================================

OLLAMA_MODEL = "llama3.2:3b"

OLLAMA_BASE_URL = "http://localhost:11434"

# Transport-level timeout for a single generation call
OLLAMA_TIMEOUT_SECONDS = 120.0

# Sampling defaults
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 500

# Question generation runs hotter for variety, grading runs cold
QUIZ_TEMPERATURE = 0.75
GRADING_TEMPERATURE = 0.3

# Token limits per question type
QUESTION_MAX_TOKENS = {
    "multiple-choice": 300,
    "true-false": 200,
    "open-ended": 300,
}

# =============================================================================
# RAG CONFIGURATION
# =============================================================================

# Number of chunks to retrieve for a tutor answer
TOP_K_CHUNKS = 5

# Results below this cosine similarity are dropped
MIN_SIMILARITY_SCORE = 0.3

# Maximum number of citations attached to a tutor answer
MAX_CITATIONS = 5

# A tutor answer reaches full confidence with this many relevant chunks
CONFIDENCE_SATURATION = 3

# User questions are truncated to this many characters
MAX_QUESTION_LENGTH = 500

# =============================================================================
# QUIZ CONFIGURATION
# =============================================================================

DEFAULT_QUIZ_SIZE = 5

DEFAULT_DIFFICULTY = "medium"

# Upper bound on concurrent generator calls while building one quiz
QUIZ_MAX_WORKERS = 4

# Open-ended answers at or above this score count as correct
PASSING_SCORE = 70

# Neutral score used when the grader output cannot be used
NEUTRAL_SCORE = 50

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = "INFO"

# =============================================================================
# TOPIC DICTIONARY
# =============================================================================

# Topic tag -> keywords; a chunk gets the tag when any keyword appears
TOPIC_KEYWORDS: dict[str, list[str]] = {
    "Network Security": ["network security", "network attack", "network defense", "network threat"],
    "Encryption": ["encryption", "cryptography", "cipher", "decrypt", "encrypt", "aes", "rsa", "des"],
    "Firewalls": ["firewall", "packet filtering", "network filtering", "access control"],
    "Authentication": ["authentication", "password", "credential", "identity", "login", "access control"],
    "Malware": ["malware", "virus", "trojan", "worm", "ransomware", "spyware"],
    "Intrusion Detection": ["intrusion detection", "ids", "ips", "security monitoring"],
    "VPN": ["vpn", "virtual private network", "tunneling", "ipsec"],
    "SSL/TLS": ["ssl", "tls", "https", "certificate", "secure socket"],
    "DoS/DDoS": ["denial of service", "dos", "ddos", "flooding"],
    "Web Security": ["web security", "xss", "sql injection", "csrf", "web application"],
}

DEFAULT_TOPIC = "Network Security"

# Topics offered by the tutor page
TUTOR_TOPICS = [
    "Network Attacks",
    "Cryptography",
    "Firewalls",
    "Intrusion Detection",
    "Authentication",
    "Network Protocols",
    "Security Architecture",
    "Risk Management",
    "Incident Response",
    "Compliance",
]

SAMPLE_QUESTIONS = [
    "What is the difference between symmetric and asymmetric encryption?",
    "How do firewalls protect network infrastructure?",
    "What are the common types of network intrusion detection systems?",
    "Explain the concept of defense in depth in network security.",
    "What is a man-in-the-middle attack and how can it be prevented?",
    "How does SSL/TLS provide secure communication?",
    "What are the key components of a network security policy?",
    "How do VPNs ensure secure remote access?",
]

# =============================================================================
# LLM PROMPT TEMPLATES
# =============================================================================

NO_CONTEXT_ANSWER = (
    "I couldn't find relevant information in the knowledge base to answer your "
    "question. Please try rephrasing your question or ensure that relevant "
    "documents have been uploaded to the system."
)

ERROR_ANSWER = (
    "I encountered an error while processing your question. Please try again "
    "or contact support if the issue persists."
)

RAG_PROMPT_TEMPLATE = """You are a helpful AI assistant specializing in network security. Answer the following question based on the provided context. If the context doesn't contain enough information, say so.

Context:
{context}

Question: {question}

Answer:"""

# Shared guidance appended to every question prompt
_QUESTION_RULES = (
    "Do not ask questions about specific images, models, or organizations "
    "(like NIST or RFC) in the database, only ask conceptual questions in which "
    "the information is provided in the database but not questions about a "
    "specific document."
)

QUESTION_PROMPT_TEMPLATES: dict[str, str] = {
    "multiple-choice": """Based on the following content about network security, generate a {difficulty} multiple-choice question with 4 options (A, B, C, D). Mark the correct answer.

Content:
{content}

IMPORTANT: Do NOT include the answer in the question text. Only provide it separately after the options.  """
    + _QUESTION_RULES
    + """  Ensure that only one answer choice is correct and the other three are incorrect.

Generate the question in this exact format:
Question: [Your question here - DO NOT reveal the answer]
A) [Option A]
B) [Option B]
C) [Option C]
D) [Option D]
Correct Answer: [Letter]""",
    "true-false": """Based on the following content about network security, generate a {difficulty} true/false question.

Content:
{content}

IMPORTANT: Do NOT include the answer in the question statement. Only provide it separately.  """
    + _QUESTION_RULES
    + """  Ensure that the question is clear in what it is asking and does not require context outside of the question.

Generate the question in this exact format:
Question: [Your statement here - DO NOT include the answer]
Correct Answer: [True or False]""",
    "open-ended": """Based on the following content about network security, generate a concise {difficulty} open-ended question that requires an explanation.  Make it only one question, not multiple.  """
    + _QUESTION_RULES
    + """

Content:
{content}

Generate the question in this format:
Question: [Your question here]
Expected Answer: [Key points that should be in the answer]""",
}

GRADING_PROMPT_TEMPLATE = """You are grading a student's answer to a network security question. Compare their answer to the correct answer and provide a score from 0 to 100 and constructive feedback.  If the answer was incorrect, explain why the correct answer is correct.  Make sure if the user's answer is gibberish or completely irrelevant to give a score of 0.

Question: {question}

Student's Answer: {user_answer}

Correct/Expected Answer: {correct_answer}

Provide your response in this exact format:
Score: [0-100]
Feedback: [Your detailed feedback explaining what was correct, what was missing, and suggestions for improvement]"""
