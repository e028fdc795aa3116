from .user import User
from .student import Student
from .teacher import Teacher
from .parent import Parent
from .course import Course
from .module import Module
from .enrollment import Enrollment
from .mark import Mark
from .attendance import Attendance
from .assignment import Assignment
from .submission import Submission
from .announcement import Announcement
__all__ = ["User", "Student", "Teacher", "Parent", "Course", "Module", "Enrollment", "Mark", "Attendance", "Assignment", "Submission", "Announcement"]
