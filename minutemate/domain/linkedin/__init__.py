"""LinkedIn domain - PDF to expert profile extraction"""
