"""phenotype-lab: does unsupervised clustering of patient features recover phenotype labels?"""
__version__ = "0.1.0"
