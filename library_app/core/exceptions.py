class LibraryError(Exception): pass

class NotFound(LibraryError): pass

class OutOfStock(LibraryError): pass

class AlreadyReturned(LibraryError): pass

class DuplicateMemberId(LibraryError): pass

class InvalidEmail(LibraryError): pass

class InvalidInput(LibraryError): pass
