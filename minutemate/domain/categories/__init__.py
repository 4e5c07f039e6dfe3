"""Categories domain - expertise catalogue"""
