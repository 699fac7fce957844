"""
patchbounty - Evaluation & settlement engine
"""
