from pathlib import Path

from styleguide.context import DirectoryContext

__meta__ = {"name": "Input", "description": "Single line text field"}
__dependency_resolver__ = DirectoryContext(Path(__file__).parent / "input_examples")
