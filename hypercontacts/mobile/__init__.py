"""Hyperview XML element model, screens and request handlers for the mobile client."""