"""
Library modules for reading Visual Pinball table files. The format code in this package is
free of any persistence concerns; `vptable.lib.store` and `vptable.lib.dedup` are the only
modules that know about the block corpus.
"""
