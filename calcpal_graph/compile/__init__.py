from .write_batch import FullRewrite, WriteBatch, compile_full_rewrite_batch

__all__ = ["FullRewrite", "WriteBatch", "compile_full_rewrite_batch"]
