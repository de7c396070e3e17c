"""
Services package for the classroom performance read path.
"""

from .base import BaseService
from .exam import ExamService
from .activity import ActivityService
from .performance import PerformanceService

__all__ = ['BaseService', 'ExamService', 'ActivityService', 'PerformanceService']
