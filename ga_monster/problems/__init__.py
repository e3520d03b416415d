"""
範例問題
"""

from .tsp import TSPFactory, TSPIndividual, TSPInstance

__all__ = ['TSPFactory', 'TSPIndividual', 'TSPInstance']
