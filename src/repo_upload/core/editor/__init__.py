from repo_upload.core.editor.abc import Editor
from repo_upload.core.editor.real import FileEditor, RealEditor

__all__ = ["Editor", "FileEditor", "RealEditor"]
