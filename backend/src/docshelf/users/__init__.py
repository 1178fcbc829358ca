"""Account provisioning"""
