"""
XPS container support: package reading/writing, page layout,
overlay serialization, font embedding and the output repair pass.
"""
