"""
Level Compile Pipeline Module.

Provides staged compilation of level sources into binary level data.
"""

from .compile_pipeline import (
    CompilePipeline,
    CompilerSettings,
    CompileResult,
    CompileProgress,
    CompileStage,
    SourceKind,
    PipelineError,
    CompileCancelledException,
    ProgressTracker,
    compile_level,
)

from .settings_storage import (
    save_settings,
    load_settings,
    list_saved_settings,
    delete_settings,
    settings_exist,
)

__all__ = [
    # Pipeline core
    'CompilePipeline',
    'CompilerSettings',
    'CompileResult',
    'CompileProgress',
    'CompileStage',
    'SourceKind',
    'PipelineError',
    'CompileCancelledException',
    'ProgressTracker',
    'compile_level',
    # Settings persistence
    'save_settings',
    'load_settings',
    'list_saved_settings',
    'delete_settings',
    'settings_exist',
]
