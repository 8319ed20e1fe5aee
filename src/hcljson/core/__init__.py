"""
Core of hcljson: syntax tree, HCL reader, converter, errors, settings.
"""
