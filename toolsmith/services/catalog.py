"""
Stock tool catalog and category presentation data
"""

from typing import Any, Dict, List

from toolsmith.models import CATEGORIES, ArtifactStatus


CATEGORY_ICONS: Dict[str, str] = {
    "pdf": "📄",
    "video": "🎥",
    "ai": "🤖",
    "image": "🖼️",
    "productivity": "📊",
    "security": "🔐",
    "developer": "💻",
    "unique": "✨",
}

CATEGORY_DESCRIPTIONS: Dict[str, str] = {
    "pdf": "Merge, split, compress, OCR, and AI analysis",
    "video": "Edit, convert, compress, and AI enhancement",
    "ai": "GPT assistants, image generation, analysis",
    "image": "Edit, enhance, background removal, AI art",
    "productivity": "Automation, scheduling, AI writing",
    "security": "Encryption, password management, VPN",
    "developer": "Code generation, API testing, debugging",
    "unique": "Revolutionary tools found nowhere else",
}

# (name, description, category, icon, status)
_STOCK_TOOLS = (
    ("AI PDF Summarizer", "Extract key points from any PDF using advanced AI", "pdf", "📄", "active"),
    ("Smart PDF Merger", "Merge PDFs with intelligent page ordering", "pdf", "🔗", "active"),
    ("OCR Text Extractor", "Extract text from images and scanned PDFs", "pdf", "👁️", "active"),
    ("PDF Compressor Pro", "Reduce PDF file size without quality loss", "pdf", "🗜️", "active"),
    ("Digital Signature Tool", "Add secure digital signatures to documents", "pdf", "✍️", "active"),
    ("AI Video Enhancer", "Upscale and enhance video quality using AI", "video", "🎬", "active"),
    ("Smart Video Trimmer", "Automatically detect and trim video segments", "video", "✂️", "active"),
    ("Background Remover", "Remove video backgrounds without green screen", "video", "🎭", "active"),
    ("Auto Subtitle Generator", "Generate accurate subtitles using speech AI", "video", "💬", "active"),
    ("ChatGPT Assistant", "Conversational AI for any task", "ai", "🤖", "active"),
    ("AI Image Generator", "Create stunning images from text descriptions", "ai", "🎨", "active"),
    ("Voice Cloning Studio", "Clone any voice with just 30 seconds of audio", "ai", "🎙️", "active"),
    ("AI Code Generator", "Generate code in any programming language", "ai", "💻", "active"),
    ("Smart Data Analyzer", "Analyze datasets and generate insights", "ai", "📊", "active"),
    ("Background Remover AI", "Remove backgrounds from images instantly", "image", "🖼️", "active"),
    ("Image Upscaler Pro", "Enhance image resolution using AI", "image", "🔍", "active"),
    ("Photo Style Transfer", "Transform photos into artistic styles", "image", "🎨", "active"),
    ("AI Resume Builder", "Create professional resumes with AI assistance", "productivity", "📋", "active"),
    ("Smart Task Scheduler", "AI-powered task and calendar management", "productivity", "📅", "active"),
    ("Excel Formula Generator", "Generate complex Excel formulas from descriptions", "productivity", "📊", "active"),
    ("Dream Interpreter", "AI analyzes and interprets your dreams", "unique", "🌙", "beta"),
    ("Nostalgia Filter", "Transform modern photos to vintage styles", "unique", "📸", "active"),
    ("Meme Resurrector", "Revive old memes with modern context", "unique", "😄", "active"),
    ("Time Capsule Creator", "Create digital time capsules for the future", "unique", "⏰", "beta"),
)


def default_catalog() -> List[Dict[str, Any]]:
    """Fresh field mappings for ``ArtifactRepository.seed_artifacts``."""
    return [
        {
            "name": name,
            "description": description,
            "category": category,
            "icon": icon,
            "status": ArtifactStatus(status),
        }
        for name, description, category, icon, status in _STOCK_TOOLS
    ]


def category_summaries(counts: Dict[str, int]) -> List[Dict[str, Any]]:
    return [
        {
            "name": category,
            "icon": CATEGORY_ICONS[category],
            "description": CATEGORY_DESCRIPTIONS[category],
            "count": counts.get(category, 0),
        }
        for category in CATEGORIES
    ]
