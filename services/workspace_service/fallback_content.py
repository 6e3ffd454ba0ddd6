"""
Workspace fallback system for graceful degradation.
Produces deterministic synthetic file content and search results when the backend is unavailable.
"""

from typing import Dict, List, Optional

from infrastructure.external.workspace_backend import SearchHit
from infrastructure.monitoring.logging_service import get_logger


README_CONTENT = """# ChatFS
A native app for chatting with your files.

## Features
- File system navigation
- Chat-based interface
- Real-time file analysis

## Installation
```bash
pip install -e .
streamlit run chatfs_app.py
```

## Development
This project uses Streamlit for the interface and an HTTP workspace backend for file access."""

PYPROJECT_CONTENT = """[project]
name = "chatfs"
version = "0.1.0"
dependencies = [
    "streamlit",
    "httpx",
    "pydantic",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]"""

PACKAGE_JSON_CONTENT = """{
  "name": "chatfs",
  "version": "0.1.0",
  "scripts": {
    "dev": "tauri dev",
    "build": "tauri build",
    "preview": "vite preview"
  },
  "dependencies": {
    "react": "^19.1.0",
    "react-dom": "^19.1.0"
  },
  "devDependencies": {
    "@tauri-apps/cli": "^2.0.0",
    "vite": "^6.3.5"
  }
}"""


def file_name_of(path: str) -> str:
    """Last path component, or the path itself when it has none"""
    return path.split("/")[-1] or path


def extension_of(file_name: str) -> str:
    """Lower-case extension without the dot, empty when there is none"""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


class WorkspaceFallbackSystem:
    """
    Provides deterministic stand-in content when the workspace backend is unavailable.

    Well-known files get exact content, everything else a template chosen by extension.
    Every method is pure so callers and tests can rely on exact output.
    """

    def __init__(self):
        self.known_files: Dict[str, str] = {
            "README.md": README_CONTENT,
            "pyproject.toml": PYPROJECT_CONTENT,
            "package.json": PACKAGE_JSON_CONTENT,
        }

        # Small fixed corpus standing in for the semantic index
        self.search_corpus: List[SearchHit] = [
            SearchHit(
                path="chatfs_app.py",
                snippet="Streamlit entry point for the main chat interface with semantic search integration...",
                score=0.95
            ),
            SearchHit(
                path="services/mention_service/mention_parser.py",
                snippet="Parses @file mentions from message text for inline previews...",
                score=0.87
            ),
            SearchHit(
                path="README.md",
                snippet="ChatFS - A native app for chatting with your files using semantic search...",
                score=0.82
            ),
        ]

    def get_file_content(self, path: str) -> str:
        """
        Get fallback content for a file

        Args:
            path: Workspace-relative path as mentioned by the user

        Returns:
            Exact content for a well-known file, otherwise an extension template
        """
        if path in self.known_files:
            return self.known_files[path]

        file_name = file_name_of(path)
        if file_name in self.known_files:
            return self.known_files[file_name]

        return self._render_template(file_name)

    def _render_template(self, file_name: str) -> str:
        extension = extension_of(file_name)

        if extension == "md":
            return (
                f"# {file_name}\n\nMarkdown file content...\n\n"
                "## Section 1\nSample content here.\n\n"
                "## Section 2\nMore content with examples."
            )
        elif extension == "json":
            name = file_name[:-len(".json")]
            return (
                "{\n"
                f'  "name": "{name}",\n'
                '  "version": "1.0.0",\n'
                '  "description": "Sample JSON file",\n'
                '  "main": "index.js",\n'
                '  "scripts": {\n'
                '    "start": "node index.js"\n'
                "  }\n"
                "}"
            )
        elif extension == "txt":
            return (
                f"{file_name}\n{'=' * len(file_name)}\n\n"
                "Text file content...\nLine 2 with more details\n"
                "Line 3 with additional information\n\nEnd of file."
            )
        elif extension == "py":
            return (
                f"# {file_name}\n\n"
                "def main():\n"
                '    """Sample Python file"""\n'
                '    print("Hello World")\n\n'
                "    result = process_data()\n"
                "    return result\n\n\n"
                "def process_data():\n"
                '    return "Processed successfully"\n\n\n'
                'if __name__ == "__main__":\n'
                "    main()"
            )
        elif extension in ("js", "ts", "tsx", "jsx"):
            return (
                f"// {file_name}\n\n"
                "function main() {\n"
                "  console.log('Hello World');\n\n"
                "  const app = new Application();\n"
                "  app.start();\n\n"
                "  return 0;\n"
                "}\n\n"
                "class Application {\n"
                "  start() {\n"
                "    console.log('Application started');\n"
                "  }\n"
                "}\n\n"
                "main();"
            )
        elif extension == "rs":
            return (
                f"// {file_name}\n\n"
                "fn main() {\n"
                '    println!("Hello, world!");\n\n'
                "    let app = Application::new();\n"
                "    app.start();\n"
                "}\n\n"
                "struct Application;\n\n"
                "impl Application {\n"
                "    fn new() -> Self {\n"
                "        Application\n"
                "    }\n\n"
                "    fn start(&self) {\n"
                '        println!("Application started");\n'
                "    }\n"
                "}"
            )
        else:
            return (
                f"File: {file_name}\n\n"
                "Binary or unknown file type.\nPreview not available.\n\n"
                "File size: Unknown\nLast modified: Unknown"
            )

    def search(self, query: str, top_k: Optional[int] = None) -> List[SearchHit]:
        """
        Filter the fixed corpus by case-insensitive substring match on path or snippet

        Args:
            query: Search text
            top_k: Maximum number of hits, None for all

        Returns:
            Matching hits, highest score first
        """
        needle = query.lower()
        hits = [
            hit for hit in self.search_corpus
            if needle in hit.path.lower() or needle in hit.snippet.lower()
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)

        if top_k is not None:
            hits = hits[:top_k]
        return hits


# Global fallback system instance
_fallback_system: Optional[WorkspaceFallbackSystem] = None


def get_fallback_system() -> WorkspaceFallbackSystem:
    """Get the global fallback system instance"""
    global _fallback_system
    if _fallback_system is None:
        _fallback_system = WorkspaceFallbackSystem()
        get_logger(__name__).debug("Workspace fallback system initialized")
    return _fallback_system

