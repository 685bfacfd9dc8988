from .database import db
from .concert import Concert, ConcertTranslation, ProgramPiece, ProgramPieceTranslation
from .ticket import Ticket
from .support import SupportReport

__all__ = ['db', 'Concert', 'ConcertTranslation', 'ProgramPiece', 'ProgramPieceTranslation',
           'Ticket', 'SupportReport']
