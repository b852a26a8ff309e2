from ekwento.dependencies.dependencies import get_current_user, get_current_admin
from ekwento.dependencies.student import get_student_identity
